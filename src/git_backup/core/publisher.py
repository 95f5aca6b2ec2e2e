"""Backup branch update."""

import logging
from typing import Optional

from ..git import Git, GitCommandError
from .errors import PublishError

logger = logging.getLogger(__name__)


def publish_ref(
    git: Git,
    ref: str,
    commit: str,
    previous: Optional[str],
    reason: str = "git-backup",
) -> None:
    """Point ``ref`` at ``commit`` if it still holds ``previous``.

    ``previous`` None requires the ref to not exist yet. The update is a
    single compare-and-swap by git, so a ref moved by someone else since it
    was resolved is left alone and reported.

    Raises:
        PublishError: if the swap fails or the ref does not end at ``commit``
    """
    try:
        git.run(["update-ref", "-m", reason, ref, commit, previous or ""])
    except GitCommandError as e:
        raise PublishError(f"Cannot update {ref}: {e.stderr or e}") from e

    current = git.rev_parse(ref)
    if current != commit:
        raise PublishError(f"{ref} points at {current}, expected {commit}")
    logger.debug("Updated %s: %s -> %s", ref, previous, commit)
