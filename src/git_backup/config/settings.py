"""Per-run settings assembled once at startup.

Combines the TOML configuration with the git configuration of the
repository being backed up. Every stage receives a ``BackupSettings``
instead of reading configuration on its own.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..git import Git, RepositoryState
from .schema import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackupSettings:
    """Everything a backup run needs besides the repository itself.

    Attributes:
        branch_prefix: Prefix for default backup branch names
        allow_root_commit: Create a parentless commit in an empty repository
        lock_timeout: Seconds to wait for another run on the same repository
        committer_name: Fixed committer identity for backup commits
        committer_email: Fixed committer email for backup commits
        author_name: Author override, None to inherit from git
        author_email: Author email override, None to inherit from git
        message_template: Commit message template with ``{timestamp}``
        timestamp_format: strftime format for ``{timestamp}``
        user_name: Display name of the person running the backup
        remote: Remote of the original branch, None if it has none
        remote_prefix: Namespace override on the remote, None to derive it
        push: Push after the local backup is published
    """

    branch_prefix: str = "backup/"
    allow_root_commit: bool = False
    lock_timeout: float = 10.0
    committer_name: str = "o1"
    committer_email: str = "o1@backup"
    author_name: Optional[str] = None
    author_email: Optional[str] = None
    message_template: str = "Backup on {timestamp}"
    timestamp_format: str = "%a %b %d %H:%M:%S %Z %Y"
    user_name: Optional[str] = None
    remote: Optional[str] = None
    remote_prefix: Optional[str] = None
    push: bool = False


def build_settings(
    config: Config, git: Git, state: RepositoryState, push: bool = False
) -> BackupSettings:
    """Resolve the settings for one run.

    Reads ``user.name`` and ``branch.<current>.remote`` from git. A remote
    configured in the TOML file takes precedence over the branch's remote.
    """
    user_name = git.config_get("user.name")

    remote = config.remote.name
    if remote is None and state.branch is not None:
        remote = git.config_get(f"branch.{state.branch}.remote")
    logger.debug("User name: %r, remote: %r", user_name, remote)

    return BackupSettings(
        branch_prefix=config.global_config.branch_prefix,
        allow_root_commit=config.global_config.allow_root_commit,
        lock_timeout=config.global_config.lock_timeout,
        committer_name=config.commit.committer_name,
        committer_email=config.commit.committer_email,
        author_name=config.commit.author_name,
        author_email=config.commit.author_email,
        message_template=config.commit.message_template,
        timestamp_format=config.commit.timestamp_format,
        user_name=user_name,
        remote=remote,
        remote_prefix=config.remote.prefix,
        push=push or config.remote.push,
    )
