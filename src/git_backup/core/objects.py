"""Tree and commit object construction for backup commits."""

import logging
from datetime import datetime
from typing import Optional

from ..config import BackupSettings
from ..git import Git, GitCommandError
from .errors import ObjectStoreError
from .stager import IsolatedIndex

logger = logging.getLogger(__name__)


def backup_message(settings: BackupSettings, now: Optional[datetime] = None) -> str:
    """Render the commit message for a backup taken at ``now``."""
    now = (now or datetime.now()).astimezone()
    return settings.message_template.format(
        timestamp=now.strftime(settings.timestamp_format)
    )


def identity_env(settings: BackupSettings) -> dict[str, str]:
    """Environment that pins the committer, and the author when overridden."""
    env = {
        "GIT_COMMITTER_NAME": settings.committer_name,
        "GIT_COMMITTER_EMAIL": settings.committer_email,
    }
    if settings.author_name:
        env["GIT_AUTHOR_NAME"] = settings.author_name
    if settings.author_email:
        env["GIT_AUTHOR_EMAIL"] = settings.author_email
    return env


def write_tree(git: Git, index: IsolatedIndex) -> str:
    """Write the isolated index out as a tree object and return its id."""
    try:
        tree = git.run(["write-tree"], env=index.env, cwd=index.work_tree)
    except GitCommandError as e:
        raise ObjectStoreError(f"Cannot write tree object: {e.stderr or e}") from e
    logger.debug("Wrote tree %s", tree)
    return tree


def commit_tree(
    git: Git,
    tree: str,
    parent: Optional[str],
    settings: BackupSettings,
    now: Optional[datetime] = None,
) -> str:
    """Wrap ``tree`` in a commit object on top of ``parent``.

    ``parent`` None makes a root commit.
    """
    args = ["commit-tree", tree]
    if parent is not None:
        args += ["-p", parent]

    message = backup_message(settings, now)
    try:
        commit = git.run(args, env=identity_env(settings), input=message + "\n")
    except GitCommandError as e:
        raise ObjectStoreError(f"Cannot write commit object: {e.stderr or e}") from e
    logger.debug("Wrote commit %s (%s)", commit, message)
    return commit


def build_backup_commit(
    git: Git,
    index: IsolatedIndex,
    parent: Optional[str],
    settings: BackupSettings,
    now: Optional[datetime] = None,
) -> str:
    """Turn a staged isolated index into a backup commit and return its id."""
    tree = write_tree(git, index)
    return commit_tree(git, tree, parent, settings, now)
