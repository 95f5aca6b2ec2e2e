"""Configuration system for git-backup.

This module provides TOML-based configuration loading, validation,
schema definitions, and the per-run settings threaded through every stage.
"""

from .loader import ConfigError, find_config_file, generate_example_config, load_config
from .schema import (
    BACKUP_IDENTITY_EMAIL,
    BACKUP_IDENTITY_NAME,
    CommitConfig,
    Config,
    GlobalConfig,
    RemoteConfig,
)
from .settings import BackupSettings, build_settings

__all__ = [
    "BACKUP_IDENTITY_EMAIL",
    "BACKUP_IDENTITY_NAME",
    "BackupSettings",
    "CommitConfig",
    "Config",
    "ConfigError",
    "GlobalConfig",
    "RemoteConfig",
    "build_settings",
    "find_config_file",
    "generate_example_config",
    "load_config",
]
