"""Shared helpers for ghorgsync tests."""

import shutil
import subprocess
from pathlib import Path

import pytest

from ghorgsync.exit_codes import SubmoduleError
from ghorgsync.infra.git_client import GitClient


class ScriptedGitClient(GitClient):
    """
    GitClient that returns scripted results instead of running git.

    ``fail`` maps an operation name to the exception class to raise;
    ``submodule_failures`` lists which submodule_update calls (1-based)
    should fail. Every call is recorded in ``calls`` as (operation, path).
    """

    def __init__(self, branch="main", dirty_files=None, pulled=False,
                 diff=(0, 0), fail=None, submodule_failures=()):
        super().__init__()
        self.branch = branch
        self.dirty_files = list(dirty_files or [])
        self.pulled = pulled
        self.diff = diff
        self.fail = dict(fail or {})
        self.submodule_failures = set(submodule_failures)
        self.calls = []
        self._submodule_calls = 0

    def _maybe_fail(self, op):
        error_cls = self.fail.get(op)
        if error_cls is not None:
            raise error_cls(f"{op} failed")

    def clone(self, url, dest):
        self.calls.append(("clone", dest))
        self._maybe_fail("clone")

    def fetch(self, path):
        self.calls.append(("fetch", path))
        self._maybe_fail("fetch")

    def submodule_update(self, path):
        self.calls.append(("submodule_update", path))
        self._submodule_calls += 1
        if self._submodule_calls in self.submodule_failures:
            raise SubmoduleError("submodule failed")

    def current_branch(self, path):
        self.calls.append(("current_branch", path))
        self._maybe_fail("current_branch")
        return self.branch

    def is_dirty(self, path):
        self.calls.append(("is_dirty", path))
        self._maybe_fail("is_dirty")
        return bool(self.dirty_files), list(self.dirty_files)

    def diff_stats(self, path):
        self.calls.append(("diff_stats", path))
        self._maybe_fail("diff_stats")
        return self.diff

    def checkout(self, path, branch):
        self.calls.append(("checkout", path))
        self._maybe_fail("checkout")
        self.branch = branch

    def pull_ff(self, path):
        self.calls.append(("pull_ff", path))
        self._maybe_fail("pull_ff")
        return self.pulled

    def operations(self):
        return [op for op, _ in self.calls]


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


def run_git(cwd, *args):
    """Run git in ``cwd`` for test setup, failing loudly."""
    return subprocess.run(
        ["git", *args], cwd=str(cwd), capture_output=True, text=True, check=True
    ).stdout


def init_repo(path: Path, branch: str = "main") -> Path:
    """Create a repository with one commit on ``branch``."""
    path.mkdir(parents=True, exist_ok=True)
    run_git(path, "init", "-q")
    run_git(path, "symbolic-ref", "HEAD", f"refs/heads/{branch}")
    run_git(path, "config", "user.email", "test@example.com")
    run_git(path, "config", "user.name", "Test")
    run_git(path, "config", "commit.gpgsign", "false")
    (path / "README.md").write_text("# test\n")
    run_git(path, "add", ".")
    run_git(path, "commit", "-q", "-m", "Initial")
    return path


def commit_file(path: Path, name: str, content: str, message: str = "change") -> None:
    (path / name).write_text(content)
    run_git(path, "add", name)
    run_git(path, "commit", "-q", "-m", message)
