"""Upstream linking and pushing of backup branches.

Backups are namespaced per contributor on a shared remote: the backup
branch ``backup/main`` of "Jane Doe" lives at ``jane.doe/backup/main``.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from ..config import BackupSettings
from ..git import Git, GitCommandError
from .errors import PushError

logger = logging.getLogger(__name__)

# Characters git never allows in a ref name component
_REF_UNSAFE = re.compile(r"[\x00-\x1f\x7f~^:?*\[\\]")


def _clean_component(part: str) -> str:
    # A component may not start or end with a dot, nor end with .lock
    while True:
        cleaned = part.strip(".")
        if cleaned.endswith(".lock"):
            cleaned = cleaned[: -len(".lock")]
        if cleaned == part:
            return cleaned
        part = cleaned


def sanitize_identity(name: Optional[str]) -> str:
    """Turn a display name into a ref-safe namespace token.

    Rules: lower-case; each run of whitespace becomes a single ``.``;
    characters git forbids in ref names and the ``@{`` sequence are
    dropped; repeated dots collapse; each slash-separated component loses
    its leading/trailing dots and a trailing ``.lock``; empty components
    are dropped.

    >>> sanitize_identity("Jane Doe")
    'jane.doe'
    >>> sanitize_identity("Bob.lock")
    'bob'
    """
    if not name:
        return ""
    token = re.sub(r"\s+", ".", name.strip()).lower()
    token = _REF_UNSAFE.sub("", token)
    while "@{" in token:
        token = token.replace("@{", "")
    token = re.sub(r"\.{2,}", ".", token)
    parts = (_clean_component(part) for part in token.split("/"))
    return "/".join(part for part in parts if part)


def remote_branch_path(backup_branch: str, prefix: str) -> str:
    """Return the branch path on the remote, ``<prefix>/<backup_branch>``.

    An empty prefix leaves the backup branch name unchanged.
    """
    prefix = prefix.strip("/")
    return f"{prefix}/{backup_branch}" if prefix else backup_branch


@dataclass(frozen=True)
class UpstreamLink:
    """Remote-tracking association of a backup branch."""

    remote: str
    remote_branch: str

    @property
    def merge_ref(self) -> str:
        return f"refs/heads/{self.remote_branch}"

    def __str__(self) -> str:
        return f"{self.remote}/{self.remote_branch}"


@dataclass(frozen=True)
class UpstreamResult:
    """Outcome of the upstream stage.

    Attributes:
        link: Association that was recorded, None when there is no remote
        pushed: Whether the backup branch was pushed successfully
        error: Message of a link or push failure, None otherwise
    """

    link: Optional[UpstreamLink] = None
    pushed: bool = False
    error: Optional[str] = None


def derive_link(backup_branch: str, settings: BackupSettings) -> Optional[UpstreamLink]:
    """Work out the upstream of ``backup_branch``, None without a remote.

    A remote of ``.`` means the original branch tracks a local branch and
    counts as no remote.
    """
    if not settings.remote or settings.remote == ".":
        return None

    if settings.remote_prefix is not None:
        prefix = settings.remote_prefix
    else:
        prefix = sanitize_identity(settings.user_name)
    return UpstreamLink(
        remote=settings.remote,
        remote_branch=remote_branch_path(backup_branch, prefix),
    )


def set_upstream(git: Git, backup_branch: str, link: UpstreamLink) -> None:
    """Record ``link`` as the upstream of ``backup_branch``.

    Written straight into the branch config so it does not require the
    remote-tracking ref to exist yet.
    """
    try:
        git.run(["config", f"branch.{backup_branch}.remote", link.remote])
        git.run(["config", f"branch.{backup_branch}.merge", link.merge_ref])
    except GitCommandError as e:
        raise PushError(f"Cannot set upstream of {backup_branch}: {e}") from e
    logger.debug("Upstream of %s set to %s", backup_branch, link)


def push_backup(git: Git, backup_branch: str, link: UpstreamLink) -> None:
    """Push ``backup_branch`` to its namespaced path on the remote."""
    refspec = f"refs/heads/{backup_branch}:{link.merge_ref}"
    logger.info("Pushing %s to %s ...", backup_branch, link)
    try:
        output = git.run(["push", "--porcelain", link.remote, refspec])
    except GitCommandError as e:
        raise PushError(f"Push to {link.remote} failed: {e.stderr or e}") from e
    logger.debug("Push output:\n%s", output)


def link_upstream(
    git: Git, backup_branch: str, settings: BackupSettings
) -> UpstreamResult:
    """Associate the backup branch with the remote and push if requested.

    Failures are returned, not raised: the local backup already stands.
    """
    link = derive_link(backup_branch, settings)
    if link is None:
        if settings.push:
            logger.warning(
                "Original branch has no remote configured; "
                "%s was not linked and not pushed",
                backup_branch,
            )
        else:
            logger.info("No remote configured, %s stays local", backup_branch)
        return UpstreamResult()

    try:
        set_upstream(git, backup_branch, link)
        if settings.push:
            push_backup(git, backup_branch, link)
    except PushError as e:
        logger.warning("%s", e)
        return UpstreamResult(link=link, pushed=False, error=str(e))

    return UpstreamResult(link=link, pushed=settings.push)
