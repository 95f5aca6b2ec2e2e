"""TOML configuration loading and validation.

Handles config file discovery, parsing, and validation with helpful error messages.
"""

import string
import tomllib
from pathlib import Path
from typing import Any

from .schema import CommitConfig, Config, GlobalConfig, RemoteConfig


class ConfigError(Exception):
    """Configuration loading or validation error."""

    pass


# Config file search paths in priority order
CONFIG_PATHS = [
    Path.home() / ".config" / "git-backup" / "config.toml",
    Path("/etc/git-backup/config.toml"),
]

KNOWN_KEYS = {
    "global": {"branch_prefix", "allow_root_commit", "log_file", "lock_timeout"},
    "commit": {
        "committer_name",
        "committer_email",
        "author_name",
        "author_email",
        "message_template",
        "timestamp_format",
    },
    "remote": {"push", "name", "prefix"},
}


def find_config_file(explicit_path: str | None = None) -> Path | None:
    """Find configuration file.

    Args:
        explicit_path: Explicitly specified config path (highest priority)

    Returns:
        Path to config file, or None if not found
    """
    if explicit_path:
        path = Path(explicit_path).expanduser()
        if path.exists():
            return path
        raise ConfigError(f"Config file not found: {explicit_path}")

    for path in CONFIG_PATHS:
        if path.exists():
            return path

    return None


def _get(data: dict[str, Any], key: str, kind: type | tuple[type, ...], default):
    """Fetch ``key`` from a table, checking its TOML type."""
    if key not in data:
        return default
    value = data[key]
    kinds = kind if isinstance(kind, tuple) else (kind,)
    # bool is an int subclass, keep them apart
    if isinstance(value, bool) and bool not in kinds:
        raise ConfigError(f"'{key}' has invalid type bool")
    if not isinstance(value, kinds):
        raise ConfigError(f"'{key}' has invalid type {type(value).__name__}")
    return value


def _parse_global(data: dict[str, Any]) -> GlobalConfig:
    """Parse global configuration from dict."""
    branch_prefix = _get(data, "branch_prefix", str, "backup/")
    if not branch_prefix.strip("/"):
        raise ConfigError("'branch_prefix' must not be empty")

    lock_timeout = _get(data, "lock_timeout", (int, float), 10.0)
    if lock_timeout < 0:
        raise ConfigError("'lock_timeout' must not be negative")

    return GlobalConfig(
        branch_prefix=branch_prefix,
        allow_root_commit=_get(data, "allow_root_commit", bool, False),
        log_file=_get(data, "log_file", str, None),
        lock_timeout=float(lock_timeout),
    )


def _check_message_template(template: str) -> None:
    """Allow only plain {timestamp} fields in the commit message template."""
    try:
        for _, field_name, _, _ in string.Formatter().parse(template):
            if field_name is not None and field_name != "timestamp":
                raise ConfigError(
                    f"Invalid 'message_template': unknown field {{{field_name}}}"
                )
        template.format(timestamp="")
    except ValueError as e:
        raise ConfigError(f"Invalid 'message_template': {e}")


def _parse_commit(data: dict[str, Any]) -> CommitConfig:
    """Parse commit configuration from dict."""
    defaults = CommitConfig()
    message_template = _get(data, "message_template", str, defaults.message_template)
    _check_message_template(message_template)

    return CommitConfig(
        committer_name=_get(data, "committer_name", str, defaults.committer_name),
        committer_email=_get(data, "committer_email", str, defaults.committer_email),
        author_name=_get(data, "author_name", str, None),
        author_email=_get(data, "author_email", str, None),
        message_template=message_template,
        timestamp_format=_get(
            data, "timestamp_format", str, defaults.timestamp_format
        ),
    )


def _parse_remote(data: dict[str, Any]) -> RemoteConfig:
    """Parse remote configuration from dict."""
    return RemoteConfig(
        push=_get(data, "push", bool, False),
        name=_get(data, "name", str, None),
        prefix=_get(data, "prefix", str, None),
    )


def _validate_config(data: dict[str, Any], config: Config) -> list[str]:
    """Validate configuration and return list of warnings."""
    warnings = []

    for section, value in data.items():
        if section not in KNOWN_KEYS:
            warnings.append(f"Unknown section [{section}]")
            continue
        for key in value:
            if key not in KNOWN_KEYS[section]:
                warnings.append(f"Unknown key '{key}' in [{section}]")

    if "{timestamp}" not in config.commit.message_template:
        warnings.append("'message_template' does not include {timestamp}")

    if not config.commit.committer_name.strip():
        warnings.append("Empty 'committer_name', git will refuse to commit")

    return warnings


def load_config(path: Path | str) -> tuple[Config, list[str]]:
    """Load and validate configuration from TOML file.

    Args:
        path: Path to configuration file

    Returns:
        Tuple of (Config object, list of warnings)

    Raises:
        ConfigError: If config is invalid or cannot be parsed
    """
    path = Path(path)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}")

    for section in KNOWN_KEYS:
        if not isinstance(data.get(section, {}), dict):
            raise ConfigError(f"[{section}] must be a table")

    config = Config(
        global_config=_parse_global(data.get("global", {})),
        commit=_parse_commit(data.get("commit", {})),
        remote=_parse_remote(data.get("remote", {})),
    )

    # Validate and collect warnings
    warnings = _validate_config(data, config)

    return config, warnings


def generate_example_config() -> str:
    """Generate example configuration file content."""
    return """# git-backup configuration
# Place at ~/.config/git-backup/config.toml

[global]
branch_prefix = "backup/"       # Default branch is <prefix><current branch>
allow_root_commit = false       # Parentless backup commit in an empty repo
# log_file = "~/.local/state/git-backup.log"
lock_timeout = 10               # Seconds to wait for a concurrent run

[commit]
committer_name = "o1"
committer_email = "o1@backup"
# author_name = "Jane Doe"      # Default: user.name from git config
# author_email = "jane@example.com"
message_template = "Backup on {timestamp}"
timestamp_format = "%a %b %d %H:%M:%S %Z %Y"

[remote]
push = false                    # Same as always passing --push
# name = "origin"               # Default: remote of the current branch
# prefix = "jane.doe"           # Default: user.name, lower-cased, spaces to dots
"""
