"""CLI entry point and argument parsing."""

import argparse
import sys

from .. import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="git-backup",
        description=(
            "Back up all working tree changes into a new commit on a backup "
            "branch without touching the index, working tree or history."
        ),
        epilog=(
            "If BACKUP_BRANCH is not specified, defaults to backup/<currentBranch>\n"
            "(backup/detached-<shortSha> when HEAD is detached).\n"
            "\n"
            "Examples:\n"
            "  git-backup\n"
            "  git-backup --push\n"
            "  git-backup my-backup-branch"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "branch",
        nargs="?",
        metavar="BACKUP_BRANCH",
        help="Backup branch to commit to",
    )
    parser.add_argument(
        "--push",
        action="store_true",
        help="Push the backup branch after creating the commit",
    )

    output = parser.add_argument_group("output options")
    verbosity = output.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        "--debug",
        action="store_true",
        help="Also log every git command and the resolved settings",
    )
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report warnings and errors",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"git-backup {__version__}",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Path to configuration file",
    )
    parser.add_argument(
        "-C",
        dest="repo",
        metavar="PATH",
        default=".",
        help="Run as if started in PATH",
    )
    parser.add_argument(
        "--example-config",
        action="store_true",
        help="Print an example configuration file and exit",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the git-backup CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.example_config:
        from ..config import generate_example_config

        print(generate_example_config(), end="")
        return 0

    from .backup_cmd import execute_backup

    return execute_backup(args)
