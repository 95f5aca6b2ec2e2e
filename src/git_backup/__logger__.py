# pyright: standard

"""git-backup: git_backup/__logger__.py
A common logger for displaying through rich.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

# Initialize basic console and handler
cons = Console()
rich_handler = RichHandler(console=cons, show_path=False)
logger = logging.getLogger("git_backup")


def create_logger(level="INFO", log_file=None) -> None:
    """Helper function to setup logging for a command run."""
    # pylint: disable=global-statement
    global cons, rich_handler

    cons = Console()
    rich_handler = RichHandler(console=cons, show_path=False, show_time=False)

    handlers: list[logging.Handler] = [rich_handler]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        format="%(message)s",
        datefmt="%H:%M:%S",
        level=level,
        handlers=handlers,
        force=True,
    )
    logger.setLevel(level)
