"""Backup branch name and parent commit resolution."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import BackupSettings
from ..git import Git, GitCommandError, RepositoryState
from .errors import PreconditionError

logger = logging.getLogger(__name__)

HEADS_PREFIX = "refs/heads/"


@dataclass(frozen=True)
class ResolvedRef:
    """Where the next backup commit goes.

    Attributes:
        branch: Backup branch name, without ``refs/heads/``
        parent: Commit the backup is parented on, None for a root commit
        previous: Value of the backup branch before this run, None if new
    """

    branch: str
    parent: Optional[str]
    previous: Optional[str]

    @property
    def ref(self) -> str:
        return HEADS_PREFIX + self.branch


def default_branch_name(state: RepositoryState, prefix: str = "backup/") -> str:
    """Return ``<prefix><current branch>``, or ``<prefix>detached-<hash>``."""
    if state.is_detached:
        current = f"detached-{state.short_head}"
    else:
        current = state.branch
    return f"{prefix}{current}"


def normalize_branch_name(git: Git, name: str) -> str:
    """Strip a leading ``refs/heads/`` and check the name is a valid branch.

    The full ref is checked, so shorthands like ``@{-1}`` are rejected
    instead of being expanded to another branch.
    """
    if name.startswith(HEADS_PREFIX):
        name = name[len(HEADS_PREFIX) :]
    if name.startswith("-"):
        raise PreconditionError(f"Invalid backup branch name {name!r}")
    try:
        git.run(["check-ref-format", HEADS_PREFIX + name])
    except GitCommandError as e:
        raise PreconditionError(f"Invalid backup branch name {name!r}") from e
    return name


def resolve_backup_ref(
    git: Git,
    state: RepositoryState,
    settings: BackupSettings,
    branch: Optional[str] = None,
) -> ResolvedRef:
    """Pick the backup branch and the parent of the next backup commit.

    An existing backup branch is its own parent so runs append to it;
    otherwise the current commit is the parent.

    Raises:
        PreconditionError: if the name is invalid, names the checked out
            branch, or there is no parent and root commits are not allowed
    """
    if branch:
        name = normalize_branch_name(git, branch)
    else:
        name = normalize_branch_name(
            git, default_branch_name(state, settings.branch_prefix)
        )

    if name == state.branch:
        raise PreconditionError(
            f"Backup branch {name!r} is the checked out branch, refusing to move it"
        )

    previous = git.rev_parse(HEADS_PREFIX + name)
    parent = previous or state.head

    if parent is None:
        if not settings.allow_root_commit:
            raise PreconditionError(
                "Repository has no commits and no backup branch "
                f"{name!r} exists; nothing to parent the backup on "
                "(set allow_root_commit to create a root commit)"
            )
        logger.info("Empty repository, backup will be a root commit")

    logger.debug("Backup branch %s, parent %s, previous %s", name, parent, previous)
    return ResolvedRef(branch=name, parent=parent, previous=previous)
