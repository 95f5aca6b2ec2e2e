"""Isolated snapshot staging.

The working tree is staged into a private copy of the index, selected
with ``GIT_INDEX_FILE`` for each git call. The real index is only ever
read (copied), never written.
"""

import contextlib
import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ..git import Git, GitCommandError, RepositoryState
from .errors import PreconditionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IsolatedIndex:
    """A throwaway index file and the environment that selects it."""

    path: Path
    work_tree: Path
    copied: bool

    @property
    def env(self) -> dict[str, str]:
        return {"GIT_INDEX_FILE": str(self.path)}


@contextlib.contextmanager
def isolated_index(state: RepositoryState) -> Iterator[IsolatedIndex]:
    """Provide a private copy of the real index for the duration of a block.

    The copy lives in its own temporary directory, which is removed on
    every exit path. If the repository had no real index, the isolated one
    starts absent and any real index that appears during the block is
    removed again.

    Raises:
        PreconditionError: for bare repositories or an unreadable index
    """
    if state.work_tree is None:
        raise PreconditionError("Bare repository has no working tree to back up")

    real_index = state.index_path
    had_real_index = real_index.exists()

    tmp_dir = Path(tempfile.mkdtemp(prefix="git-backup-"))
    try:
        path = tmp_dir / "index"
        if had_real_index:
            try:
                shutil.copyfile(real_index, path)
            except OSError as e:
                raise PreconditionError(f"Cannot copy index {real_index}: {e}") from e
            logger.debug("Copied %s to %s", real_index, path)
        else:
            logger.debug("No index at %s, starting from an empty one", real_index)

        yield IsolatedIndex(path=path, work_tree=state.work_tree, copied=had_real_index)
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)
        if not had_real_index and real_index.exists():
            logger.debug("Removing index created during backup: %s", real_index)
            real_index.unlink(missing_ok=True)


def stage_all(git: Git, index: IsolatedIndex) -> None:
    """Stage every addition, modification and deletion into ``index``.

    Ignored paths stay out, as with a normal ``git add -A``.

    Raises:
        PreconditionError: if the working tree cannot be read
    """
    logger.debug("Staging working tree %s", index.work_tree)
    try:
        git.run(["add", "--all", "--", "."], env=index.env, cwd=index.work_tree)
    except GitCommandError as e:
        raise PreconditionError(f"Cannot stage working tree: {e.stderr or e}") from e
