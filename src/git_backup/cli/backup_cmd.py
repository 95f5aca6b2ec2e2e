"""Backup command: commit the working tree to the backup branch."""

import argparse
import logging
from pathlib import Path

from ..__logger__ import create_logger
from ..config import (
    Config,
    ConfigError,
    build_settings,
    find_config_file,
    load_config,
)
from ..core import BackupError, create_backup
from ..git import Git, GitCommandError, read_repository_state

logger = logging.getLogger(__name__)


def log_level(args: argparse.Namespace) -> str:
    """Map -v/-q to a logging level name, INFO by default."""
    if getattr(args, "verbose", False):
        return "DEBUG"
    if getattr(args, "quiet", False):
        return "WARNING"
    return "INFO"


def _load_config(args: argparse.Namespace) -> Config:
    config_path = find_config_file(getattr(args, "config", None))
    if config_path is None:
        logger.debug("No configuration file found, using defaults")
        return Config()

    logger.debug("Loading configuration from: %s", config_path)
    config, warnings = load_config(config_path)
    for warning in warnings:
        logger.warning("Config: %s", warning)
    return config


def execute_backup(args: argparse.Namespace) -> int:
    """Execute the backup command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 for failure). A failed push still
        returns 0 since the local backup was created.
    """
    level = log_level(args)
    create_logger(level)

    try:
        config = _load_config(args)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1

    if config.global_config.log_file:
        log_path = Path(config.global_config.log_file).expanduser()
        try:
            create_logger(level, log_path)
        except OSError as e:
            logger.error(
                "Configuration error: cannot open log_file %s: %s", log_path, e
            )
            return 1

    git = Git(getattr(args, "repo", "."))
    try:
        state = read_repository_state(git)
        settings = build_settings(config, git, state, push=getattr(args, "push", False))
    except GitCommandError as e:
        logger.error("Not a usable git repository: %s", git.path)
        logger.debug("%s", e)
        return 1

    try:
        result = create_backup(git, state, settings, getattr(args, "branch", None))
    except BackupError as e:
        logger.error("Backup failed: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130

    upstream = result.upstream
    if upstream.pushed:
        logger.info("Pushed %s to %s", result.branch, upstream.link)
    elif upstream.error:
        logger.warning("Local backup is intact; the remote was not updated")
    elif upstream.link:
        logger.info("Upstream of %s is %s", result.branch, upstream.link)

    return 0
