"""Configuration schema definitions using dataclasses.

Defines the structure for TOML configuration with sensible defaults.
"""

from dataclasses import dataclass, field
from typing import Optional

BACKUP_IDENTITY_NAME = "o1"
BACKUP_IDENTITY_EMAIL = "o1@backup"


@dataclass
class CommitConfig:
    """Backup commit object configuration.

    Attributes:
        committer_name: Committer name stamped on every backup commit
        committer_email: Committer email stamped on every backup commit
        author_name: Author name override (None inherits from git config)
        author_email: Author email override (None inherits from git config)
        message_template: Commit message, ``{timestamp}`` is substituted
        timestamp_format: strftime format used for ``{timestamp}``
    """

    committer_name: str = BACKUP_IDENTITY_NAME
    committer_email: str = BACKUP_IDENTITY_EMAIL
    author_name: Optional[str] = None
    author_email: Optional[str] = None
    message_template: str = "Backup on {timestamp}"
    timestamp_format: str = "%a %b %d %H:%M:%S %Z %Y"


@dataclass
class RemoteConfig:
    """Upstream linking and push configuration.

    Attributes:
        push: Push after every backup, same as passing --push
        name: Remote to use instead of the current branch's remote
        prefix: Namespace on the remote instead of the sanitized user name
    """

    push: bool = False
    name: Optional[str] = None
    prefix: Optional[str] = None


@dataclass
class GlobalConfig:
    """Global configuration settings.

    Attributes:
        branch_prefix: Prefix for default backup branch names
        allow_root_commit: Create a parentless commit in an empty repository
        log_file: Path to log file (None for no file logging)
        lock_timeout: Seconds to wait for another run on the same repository
    """

    branch_prefix: str = "backup/"
    allow_root_commit: bool = False
    log_file: Optional[str] = None
    lock_timeout: float = 10.0


@dataclass
class Config:
    """Root configuration object."""

    global_config: GlobalConfig = field(default_factory=GlobalConfig)
    commit: CommitConfig = field(default_factory=CommitConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)
