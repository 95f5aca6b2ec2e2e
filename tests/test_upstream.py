"""Tests for upstream derivation, linking and pushing."""

import logging

import pytest

from conftest import run_git
from git_backup.config import BackupSettings
from git_backup.core.errors import PushError
from git_backup.core.upstream import (
    UpstreamLink,
    derive_link,
    link_upstream,
    push_backup,
    remote_branch_path,
    sanitize_identity,
)
from git_backup.git import Git


class TestSanitizeIdentity:
    """Tests for sanitize_identity function."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Jane Doe", "jane.doe"),
            ("  Jane   Q\tDoe ", "jane.q.doe"),
            ("jane", "jane"),
            ("Ann~Marie: O'Neil", "annmarie.o'neil"),
            ("José Núñez", "josé.núñez"),
            (".Dot Start.", "dot.start"),
            ("Jane @{Doe}", "jane.doe}"),
            ("x@@{{y", "xy"),
            ("Bob.lock", "bob"),
            ("Bob.LOCK", "bob"),
            ("a.lock.lock.", "a"),
            ("team/x.lock", "team/x"),
            ("//team/.hidden//", "team/hidden"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_rules(self, raw, expected):
        assert sanitize_identity(raw) == expected


class TestRemoteBranchPath:
    """Tests for remote_branch_path function."""

    def test_with_prefix(self):
        assert remote_branch_path("backup/main", "jane.doe") == "jane.doe/backup/main"

    def test_empty_prefix(self):
        """Test that no identity leaves the name unchanged."""
        assert remote_branch_path("backup/main", "") == "backup/main"

    def test_prefix_slashes_trimmed(self):
        assert remote_branch_path("backup/main", "/team/") == "team/backup/main"


class TestDeriveLink:
    """Tests for derive_link function."""

    def test_identity_namespace(self):
        """Test main on origin with identity 'Jane Doe'."""
        settings = BackupSettings(user_name="Jane Doe", remote="origin")
        link = derive_link("backup/main", settings)
        assert link == UpstreamLink("origin", "jane.doe/backup/main")
        assert link.merge_ref == "refs/heads/jane.doe/backup/main"
        assert str(link) == "origin/jane.doe/backup/main"

    def test_prefix_override(self):
        settings = BackupSettings(
            user_name="Jane Doe", remote="origin", remote_prefix="x"
        )
        assert derive_link("backup/main", settings).remote_branch == "x/backup/main"

    def test_no_remote(self):
        assert derive_link("backup/main", BackupSettings(user_name="Jane")) is None

    def test_local_tracking_is_no_remote(self):
        """Test that a '.' remote counts as no remote."""
        assert derive_link("backup/main", BackupSettings(remote=".")) is None

    @pytest.mark.parametrize(
        "user_name", ["Bob.lock", "Jane @{u} Doe", "x@{-1}", "/team/.lock/"]
    )
    def test_remote_branch_is_valid_ref(self, repo, user_name):
        """Test that awkward identities still give a valid remote branch."""
        settings = BackupSettings(user_name=user_name, remote="origin")
        link = derive_link("backup/main", settings)
        run_git(repo, "check-ref-format", link.merge_ref)
        assert "@{" not in link.remote_branch
        assert not link.remote_branch.split("/")[0].endswith(".lock")


class TestLinkUpstream:
    """Tests for link_upstream function."""

    def _backup_branch(self, repo):
        run_git(repo, "branch", "backup/main", "HEAD")
        return run_git(repo, "rev-parse", "HEAD")

    def test_no_remote_is_noop(self, repo, caplog):
        """Test that --push without a remote only warns."""
        self._backup_branch(repo)
        settings = BackupSettings(user_name="Jane Doe", push=True)
        with caplog.at_level(logging.WARNING):
            result = link_upstream(Git(repo), "backup/main", settings)
        assert result.link is None
        assert not result.pushed
        assert result.error is None
        assert "no remote configured" in caplog.text
        assert Git(repo).config_get("branch.backup/main.remote") is None

    def test_link_without_push(self, repo, remote_repo):
        """Test that the upstream is recorded but nothing is pushed."""
        self._backup_branch(repo)
        settings = BackupSettings(user_name="Jane Doe", remote="origin")
        result = link_upstream(Git(repo), "backup/main", settings)

        assert result.link == UpstreamLink("origin", "jane.doe/backup/main")
        assert not result.pushed
        git = Git(repo)
        assert git.config_get("branch.backup/main.remote") == "origin"
        assert (
            git.config_get("branch.backup/main.merge")
            == "refs/heads/jane.doe/backup/main"
        )
        assert Git(remote_repo).rev_parse("refs/heads/jane.doe/backup/main") is None

    def test_link_and_push(self, repo, remote_repo):
        """Test pushing to the namespaced path on the remote."""
        tip = self._backup_branch(repo)
        settings = BackupSettings(user_name="Jane Doe", remote="origin", push=True)
        result = link_upstream(Git(repo), "backup/main", settings)

        assert result.pushed
        assert result.error is None
        assert Git(remote_repo).rev_parse("refs/heads/jane.doe/backup/main") == tip
        assert run_git(repo, "rev-parse", "backup/main@{upstream}") == tip

    def test_push_failure_is_reported(self, repo, remote_repo, tmp_path, caplog):
        """Test that an unreachable remote is a warning, not an exception."""
        self._backup_branch(repo)
        run_git(repo, "remote", "set-url", "origin", str(tmp_path / "missing.git"))
        settings = BackupSettings(user_name="Jane Doe", remote="origin", push=True)
        with caplog.at_level(logging.WARNING):
            result = link_upstream(Git(repo), "backup/main", settings)

        assert not result.pushed
        assert "Push to origin failed" in result.error
        assert "Push to origin failed" in caplog.text
        assert run_git(repo, "rev-parse", "backup/main")


class TestPushBackup:
    """Tests for push_backup function."""

    def test_missing_local_branch(self, repo, remote_repo):
        """Test that pushing a missing branch raises PushError."""
        with pytest.raises(PushError):
            link = UpstreamLink("origin", "x/backup/none")
            push_backup(Git(repo), "backup/none", link)
