"""
Git client infrastructure for ghorgsync.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to replace with a scripted fake in tests
- Consistent in error handling
- Scoped to exactly one repository directory per call
"""

import subprocess
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from ..domain.repository import DirtyFile
from ..exit_codes import (
    GitOperationError,
    CloneError,
    FetchError,
    CheckoutError,
    PullError,
    SubmoduleError,
    RemoteError,
)
from ..git_ops.utils import parse_git_status, parse_numstat

logger = logging.getLogger(__name__)


@dataclass
class GitOutput:
    """Captured result of one git invocation."""
    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def diagnostic(self) -> str:
        """Combined output, as git would have shown it on a terminal."""
        return "\n".join(p for p in (self.stderr.strip(), self.stdout.strip()) if p)


class GitClient:
    """
    Abstraction over git commands.

    Every method takes the repository directory it operates on and raises
    the operation-specific GitOperationError subclass on failure, with git's
    diagnostic text attached.

    Example:
        client = GitClient()
        client.fetch("/path/to/repo")
        dirty, files = client.is_dirty("/path/to/repo")
    """

    def __init__(self, timeout: Optional[int] = None, executable: str = "git"):
        """
        Initialize GitClient.

        Args:
            timeout: Per-command timeout in seconds (default: no timeout)
            executable: git binary to invoke
        """
        self.timeout = timeout
        self.executable = executable

    def _run(self, args: List[str], cwd: str) -> GitOutput:
        """
        Run a git command.

        Args:
            args: Arguments after the git executable
            cwd: Working directory

        Returns:
            GitOutput; a failure to start git is reported as returncode -1
        """
        cmd = [self.executable] + args
        logger.debug(f"Running in {cwd}: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout
            )
            return GitOutput(result.stdout or "", result.stderr or "", result.returncode)
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return GitOutput("", f"timed out after {self.timeout}s", -1)
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return GitOutput("", str(e), -1)

    def _check(self, args: List[str], cwd: str, error_cls=GitOperationError) -> GitOutput:
        """Run a git command and raise ``error_cls`` on a non-zero exit."""
        output = self._run(args, cwd)
        if not output.ok:
            raise error_cls(output.diagnostic, command="git " + " ".join(args))
        return output

    def clone(self, url: str, dest: str) -> None:
        """Clone ``url`` into ``dest`` including submodules."""
        dest_path = Path(dest)
        self._check(
            ["clone", "--recurse-submodules", url, str(dest_path)],
            cwd=str(dest_path.parent),
            error_cls=CloneError,
        )

    def fetch(self, path: str) -> None:
        """Fetch all remotes, pruning deleted refs."""
        self._check(["fetch", "--all", "--prune"], cwd=path, error_cls=FetchError)

    def submodule_update(self, path: str) -> None:
        """Initialize and update submodules recursively."""
        self._check(
            ["submodule", "update", "--init", "--recursive"],
            cwd=path,
            error_cls=SubmoduleError,
        )

    def current_branch(self, path: str) -> str:
        """Get current branch name (``HEAD`` when detached)."""
        output = self._check(["rev-parse", "--abbrev-ref", "HEAD"], cwd=path, error_cls=FetchError)
        return output.stdout.strip()

    def is_dirty(self, path: str) -> Tuple[bool, List[DirtyFile]]:
        """
        Check for uncommitted changes.

        Returns:
            Tuple of (dirty, changed files)
        """
        output = self._check(["status", "--porcelain"], cwd=path, error_cls=FetchError)
        files = parse_git_status(output.stdout)
        return bool(files), files

    def diff_stats(self, path: str) -> Tuple[int, int]:
        """
        Count added/deleted lines across staged and unstaged changes.

        A failing side contributes nothing; only when both fail is an
        error raised.

        Returns:
            Tuple of (additions, deletions)
        """
        additions = deletions = 0
        failures = []
        for args in (["diff", "--cached", "--numstat"], ["diff", "--numstat"]):
            output = self._run(args, cwd=path)
            if not output.ok:
                failures.append((args, output))
                continue
            a, d = parse_numstat(output.stdout)
            additions += a
            deletions += d

        if len(failures) == 2:
            args, output = failures[-1]
            raise GitOperationError(output.diagnostic, command="git " + " ".join(args))
        for args, output in failures:
            logger.debug(f"git {' '.join(args)} failed in {path}: {output.diagnostic}")
        return additions, deletions

    def checkout(self, path: str, branch: str) -> None:
        """Check out ``branch``."""
        self._check(["checkout", branch], cwd=path, error_cls=CheckoutError)

    def head(self, path: str) -> Optional[str]:
        """Commit hash of HEAD, or None for an unborn branch."""
        output = self._run(["rev-parse", "HEAD"], cwd=path)
        return output.stdout.strip() if output.ok else None

    def pull_ff(self, path: str) -> bool:
        """
        Pull with --ff-only; never creates a merge commit.

        Returns:
            True if HEAD moved
        """
        before = self.head(path)
        self._check(["pull", "--ff-only"], cwd=path, error_cls=PullError)
        after = self.head(path)
        return before != after

    def remote_url(self, path: str, remote: str = "origin") -> str:
        """URL of ``remote``; raises RemoteError if it is not configured."""
        output = self._check(["remote", "get-url", remote], cwd=path, error_cls=RemoteError)
        return output.stdout.strip()
