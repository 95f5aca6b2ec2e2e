# pyright: standard

"""git-backup: git_backup/git.py
Thin wrapper around the git executable.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """A git invocation exited with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, stderr: str = "") -> None:
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(
            f"git {' '.join(args)} failed with exit code {returncode}"
            + (f": {self.stderr}" if self.stderr else "")
        )


class Git:
    """Run git commands against one repository.

    Extra environment variables are passed per call and merged over the
    process environment; ``os.environ`` itself is never modified.
    """

    def __init__(self, path: str | Path = ".") -> None:
        self.path = Path(path).expanduser().absolute()

    def __repr__(self) -> str:
        return f"Git({str(self.path)!r})"

    def run(
        self,
        args: list[str],
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
        input: Optional[str] = None,
    ) -> str:
        """Run ``git <args>`` and return its stripped stdout.

        Raises:
            GitCommandError: if git exits non-zero or cannot be started
        """
        full_env = None
        if env:
            full_env = {**os.environ, **env}

        logger.debug("Executing: git %s", " ".join(args))
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=cwd or self.path,
                env=full_env,
                input=input,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise GitCommandError(args, -1, str(e)) from e

        if result.returncode != 0:
            logger.debug("git %s stderr: %s", args[0], result.stderr.strip())
            raise GitCommandError(args, result.returncode, result.stderr)
        return result.stdout.strip()

    def try_run(self, args: list[str], **kwargs) -> Optional[str]:
        """Like run(), but return None instead of raising on failure."""
        try:
            return self.run(args, **kwargs)
        except GitCommandError:
            return None

    def config_get(self, key: str) -> Optional[str]:
        """Read a single git configuration value, or None if it is unset."""
        value = self.try_run(["config", "--get", key])
        return value or None

    def rev_parse(self, ref: str) -> Optional[str]:
        """Resolve ``ref`` to a full commit id, or None if it does not exist."""
        return self.try_run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])


@dataclass(frozen=True)
class RepositoryState:
    """Snapshot of the repository facts the backup run depends on.

    Attributes:
        branch: Current branch name, or None when HEAD is detached
        head: Full id of the current commit, or None in an empty repository
        short_head: Abbreviated id of the current commit, or None
        git_dir: Absolute path of the git directory
        work_tree: Absolute path of the work tree root, or None for bare repos
        index_path: Absolute path of the real index file (may not exist)
    """

    branch: Optional[str]
    head: Optional[str]
    short_head: Optional[str]
    git_dir: Path
    work_tree: Optional[Path]
    index_path: Path

    @property
    def is_detached(self) -> bool:
        return self.branch is None

    @property
    def is_empty(self) -> bool:
        return self.head is None


def _absolute(git: Git, value: str) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = git.path / path
    return path.resolve()


def read_repository_state(git: Git) -> RepositoryState:
    """Query git for the current branch, commit and index location.

    Raises:
        GitCommandError: if ``git.path`` is not inside a git repository
    """
    git_dir = _absolute(git, git.run(["rev-parse", "--git-dir"]))

    work_tree = None
    if git.run(["rev-parse", "--is-inside-work-tree"]) == "true":
        work_tree = Path(git.run(["rev-parse", "--show-toplevel"])).resolve()

    # symbolic-ref also answers on an unborn branch, unlike rev-parse
    branch = git.try_run(["symbolic-ref", "--short", "--quiet", "HEAD"]) or None

    head = git.rev_parse("HEAD")
    short_head = git.run(["rev-parse", "--short", head]) if head else None

    index_path = _absolute(git, git.run(["rev-parse", "--git-path", "index"]))

    state = RepositoryState(
        branch=branch,
        head=head,
        short_head=short_head,
        git_dir=git_dir,
        work_tree=work_tree,
        index_path=index_path,
    )
    logger.debug("Repository state: %s", state)
    return state
