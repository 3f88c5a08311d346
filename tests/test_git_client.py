"""
Tests for GitClient against real git repositories.
"""

import subprocess
from unittest.mock import patch

import pytest

from conftest import commit_file, init_repo, requires_git, run_git
from ghorgsync.domain import RemoteRepository, RepoAction
from ghorgsync.exit_codes import (
    CheckoutError,
    CloneError,
    FetchError,
    GitOperationError,
    PullError,
    RemoteError,
)
from ghorgsync.infra.git_client import GitClient, GitOutput
from ghorgsync.services.scan_service import ScanResult
from ghorgsync.services.sync_service import SyncService


class TestGitOutput:
    def test_diagnostic_joins_streams(self):
        out = GitOutput("out text\n", "fatal: nope\n", 128)
        assert not out.ok
        assert out.diagnostic == "fatal: nope\nout text"

    def test_diagnostic_empty(self):
        assert GitOutput("", "", 0).diagnostic == ""


class TestRunFailures:
    """Failures to start git are reported, not raised."""

    def test_missing_executable(self, tmp_path):
        client = GitClient(executable="definitely-not-git-xyz")
        with pytest.raises(FetchError) as exc_info:
            client.fetch(str(tmp_path))
        assert exc_info.value.command == "git fetch --all --prune"

    def test_timeout(self, tmp_path):
        client = GitClient(timeout=1)
        with patch("ghorgsync.infra.git_client.subprocess.run",
                   side_effect=subprocess.TimeoutExpired(cmd="git", timeout=1)):
            output = client._run(["status"], str(tmp_path))
        assert output.returncode == -1
        assert "timed out" in output.stderr


@requires_git
class TestGitClientIntegration:
    """Clone, dirty detection and fast-forward pulls on local repositories."""

    @pytest.fixture
    def upstream(self, tmp_path):
        """A bare remote seeded from a working repository."""
        work = init_repo(tmp_path / "seed")
        bare = tmp_path / "remote.git"
        run_git(tmp_path, "clone", "-q", "--bare", str(work), str(bare))
        run_git(work, "remote", "add", "origin", str(bare))
        return work, bare

    @pytest.fixture
    def clone(self, tmp_path, upstream):
        _, bare = upstream
        dest = tmp_path / "clones" / "repo"
        dest.parent.mkdir()
        GitClient().clone(str(bare), str(dest))
        run_git(dest, "config", "user.email", "test@example.com")
        run_git(dest, "config", "user.name", "Test")
        run_git(dest, "config", "commit.gpgsign", "false")
        return dest

    def test_clone(self, clone):
        assert (clone / ".git").is_dir()
        assert (clone / "README.md").exists()
        assert GitClient().current_branch(str(clone)) == "main"

    def test_clone_failure(self, tmp_path):
        with pytest.raises(CloneError) as exc_info:
            GitClient().clone(str(tmp_path / "no-such-remote"), str(tmp_path / "dest"))
        assert exc_info.value.detail

    def test_clean_tree(self, clone):
        dirty, files = GitClient().is_dirty(str(clone))
        assert not dirty
        assert files == []

    def test_dirty_tree(self, clone):
        (clone / "README.md").write_text("# changed\nmore\n")
        (clone / "new.txt").write_text("new\n")
        client = GitClient()

        dirty, files = client.is_dirty(str(clone))

        assert dirty
        assert {f.path for f in files} == {"README.md", "new.txt"}
        additions, deletions = client.diff_stats(str(clone))
        assert additions == 2
        assert deletions == 1

    def test_pull_ff_without_changes(self, clone):
        client = GitClient()
        client.fetch(str(clone))
        assert client.pull_ff(str(clone)) is False

    def test_pull_ff_advances(self, clone, upstream):
        work, _ = upstream
        commit_file(work, "b.txt", "b\n")
        run_git(work, "push", "-q", "origin", "main")

        client = GitClient()
        client.fetch(str(clone))
        assert client.pull_ff(str(clone)) is True
        assert (clone / "b.txt").exists()

    def test_pull_ff_refuses_diverged_history(self, clone, upstream):
        work, _ = upstream
        commit_file(work, "b.txt", "upstream\n")
        run_git(work, "push", "-q", "origin", "main")
        commit_file(clone, "c.txt", "local\n")

        client = GitClient()
        client.fetch(str(clone))
        head_before = client.head(str(clone))
        with pytest.raises(PullError):
            client.pull_ff(str(clone))
        assert client.head(str(clone)) == head_before

    def test_checkout(self, clone):
        run_git(clone, "checkout", "-q", "-b", "feature")
        client = GitClient()
        assert client.current_branch(str(clone)) == "feature"
        client.checkout(str(clone), "main")
        assert client.current_branch(str(clone)) == "main"

    def test_checkout_unknown_branch(self, clone):
        with pytest.raises(CheckoutError):
            GitClient().checkout(str(clone), "no-such-branch")

    def test_submodule_update_without_submodules(self, clone):
        GitClient().submodule_update(str(clone))

    def test_remote_url(self, clone, upstream):
        _, bare = upstream
        assert GitClient().remote_url(str(clone)) == str(bare)

    def test_remote_url_missing_remote(self, clone):
        with pytest.raises(RemoteError):
            GitClient().remote_url(str(clone), remote="nope")


def _checkout_raw_branch(path, raw_name):
    subprocess.run([b"git", b"checkout", b"-q", b"-b", raw_name],
                   cwd=str(path), capture_output=True, check=True)


@requires_git
class TestUndecodableOutput:
    """Git output that is not valid UTF-8 is decoded with replacement."""

    def test_non_utf8_branch_name(self, tmp_path):
        repo = init_repo(tmp_path / "bad")
        _checkout_raw_branch(repo, b"caf\xe9")

        assert GitClient().current_branch(str(repo)) == "caf\ufffd"

    @pytest.mark.parametrize("jobs", [1, 2])
    def test_other_repositories_still_processed(self, tmp_path, jobs):
        init_repo(tmp_path / "bad")
        _checkout_raw_branch(tmp_path / "bad", b"caf\xe9")
        init_repo(tmp_path / "good")
        repos = [RemoteRepository("bad"), RemoteRepository("good")]

        results = SyncService(str(tmp_path), GitClient()).run(
            ScanResult(managed_found=["bad", "good"]), repos, jobs=jobs
        )

        assert [r.name for r in results] == ["bad", "good"]
        assert results[0].branch_drift
        assert results[1].action != RepoAction.NONE


class TestDiffStats:
    """Staged and unstaged counts are collected independently."""

    def test_unstaged_failure_keeps_staged_counts(self, tmp_path):
        client = GitClient()
        outputs = [GitOutput("3\t1\ta.py\n", "", 0), GitOutput("", "fatal: broken", 128)]
        with patch.object(client, "_run", side_effect=outputs):
            assert client.diff_stats(str(tmp_path)) == (3, 1)

    def test_staged_failure_keeps_unstaged_counts(self, tmp_path):
        client = GitClient()
        outputs = [GitOutput("", "fatal: broken", 128), GitOutput("2\t5\tb.py\n", "", 0)]
        with patch.object(client, "_run", side_effect=outputs):
            assert client.diff_stats(str(tmp_path)) == (2, 5)

    def test_both_fail(self, tmp_path):
        client = GitClient()
        outputs = [GitOutput("", "fatal: one", 128), GitOutput("", "fatal: two", 128)]
        with patch.object(client, "_run", side_effect=outputs):
            with pytest.raises(GitOperationError) as exc_info:
                client.diff_stats(str(tmp_path))
        assert exc_info.value.detail == "fatal: two"
