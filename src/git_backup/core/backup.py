"""Backup run: resolve, stage, build, publish, link.

Each stage feeds the next; any fatal failure stops the run before the
backup branch moves, and the isolated index is always cleaned up.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from filelock import FileLock, Timeout

from .. import BACKUP_LOCK_NAME
from ..config import BackupSettings
from ..git import Git, RepositoryState
from .errors import PreconditionError
from .objects import build_backup_commit
from .publisher import publish_ref
from .resolver import ResolvedRef, resolve_backup_ref
from .stager import isolated_index, stage_all
from .upstream import UpstreamResult, link_upstream

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackupResult:
    """What a successful run produced."""

    branch: str
    commit: str
    parent: Optional[str]
    upstream: UpstreamResult


def create_backup(
    git: Git,
    state: RepositoryState,
    settings: BackupSettings,
    branch: Optional[str] = None,
    now: Optional[datetime] = None,
) -> BackupResult:
    """Snapshot the working tree onto the backup branch.

    Args:
        git: Runner bound to the repository
        state: Repository state read at startup
        settings: Settings for this run
        branch: Backup branch name, None for the default
        now: Timestamp for the commit message, None for the current time

    Returns:
        BackupResult describing the new commit and upstream outcome

    Raises:
        PreconditionError: if nothing can be backed up, or another run holds
            the repository lock
        ObjectStoreError: if the tree or commit object cannot be written
        PublishError: if the backup branch cannot be moved
    """
    lock_path = state.git_dir / BACKUP_LOCK_NAME
    try:
        with FileLock(lock_path, timeout=settings.lock_timeout):
            resolved = resolve_backup_ref(git, state, settings, branch)
            commit = _snapshot_and_publish(git, state, settings, resolved, now)
    except Timeout as e:
        raise PreconditionError(
            f"Another backup of this repository is running (lock {lock_path})"
        ) from e

    logger.info("Created backup commit %s on branch '%s'.", commit, resolved.branch)

    upstream = link_upstream(git, resolved.branch, settings)
    return BackupResult(
        branch=resolved.branch,
        commit=commit,
        parent=resolved.parent,
        upstream=upstream,
    )


def _snapshot_and_publish(
    git: Git,
    state: RepositoryState,
    settings: BackupSettings,
    resolved: ResolvedRef,
    now: Optional[datetime],
) -> str:
    with isolated_index(state) as index:
        stage_all(git, index)
        commit = build_backup_commit(git, index, resolved.parent, settings, now)
    publish_ref(git, resolved.ref, commit, resolved.previous)
    return commit
