"""Pytest configuration and shared fixtures."""

import subprocess
from pathlib import Path

import pytest

from git_backup.config import loader


def run_git(cwd: Path, *args: str) -> str:
    """Run git in ``cwd`` and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def init_repo(path: Path, user_name: str = "Jane Doe") -> Path:
    """Create an empty repository on branch main with a local identity."""
    path.mkdir(parents=True, exist_ok=True)
    run_git(path, "init", "--initial-branch=main")
    run_git(path, "config", "user.name", user_name)
    run_git(path, "config", "user.email", "jane@example.com")
    run_git(path, "config", "commit.gpgsign", "false")
    return path


@pytest.fixture(autouse=True)
def isolated_git_env(tmp_path, monkeypatch):
    """Keep the user's git and git-backup configuration out of tests."""
    global_config = tmp_path / "gitconfig"
    global_config.touch()
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    for var in (
        "GIT_DIR",
        "GIT_WORK_TREE",
        "GIT_INDEX_FILE",
        "GIT_AUTHOR_NAME",
        "GIT_AUTHOR_EMAIL",
        "GIT_COMMITTER_NAME",
        "GIT_COMMITTER_EMAIL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(loader, "CONFIG_PATHS", [])


@pytest.fixture
def empty_repo(tmp_path):
    """Create a repository without any commits."""
    return init_repo(tmp_path / "empty")


@pytest.fixture
def repo(tmp_path):
    """Create a repository on main with one commit C0 holding a.txt."""
    path = init_repo(tmp_path / "repo")
    (path / "a.txt").write_text("one\n")
    (path / "gone.txt").write_text("delete me\n")
    (path / ".gitignore").write_text("*.log\n")
    run_git(path, "add", ".")
    run_git(path, "commit", "-m", "C0")
    return path


@pytest.fixture
def remote_repo(tmp_path, repo):
    """Create a bare origin and push main to it with upstream tracking."""
    origin = tmp_path / "origin.git"
    origin.mkdir()
    run_git(origin, "init", "--bare", "--initial-branch=main")
    run_git(repo, "remote", "add", "origin", str(origin))
    run_git(repo, "push", "--quiet", "-u", "origin", "main")
    return origin


@pytest.fixture
def config_file(tmp_path):
    """Create a temporary config file with every section set."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
[global]
branch_prefix = "safety/"
allow_root_commit = true
lock_timeout = 2

[commit]
committer_name = "backup-bot"
committer_email = "bot@backup"
author_name = "Someone Else"
message_template = "Snapshot at {timestamp}"
timestamp_format = "%Y-%m-%d"

[remote]
push = true
name = "upstream"
prefix = "team"
"""
    )
    return config_path
