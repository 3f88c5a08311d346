"""
Synchronization service for ghorgsync.

Clones missing repositories and brings existing clones up to date with
their default branch. A dirty working tree is never checked out or pulled,
and pulls are fast-forward only, so local work is never discarded or merged.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..domain.operation import Decision, RepoAction, RepoResult
from ..domain.repository import RemoteRepository
from ..exit_codes import GitOperationError
from ..infra.git_client import GitClient
from .scan_service import ScanResult

logger = logging.getLogger(__name__)

DIRTY_SKIP_REASON = "working tree is dirty"


def decide_actions(is_dirty: bool, current_branch: str, default_branch: str) -> Decision:
    """
    Decide which git operations to run for a repository.

    Fetching is always safe. A dirty tree gets nothing else; a clean tree on
    the wrong branch is checked out to the default branch, then pulled.
    """
    if is_dirty:
        return Decision(should_fetch=True, skip_reason=DIRTY_SKIP_REASON)

    return Decision(
        should_fetch=True,
        should_checkout=current_branch != default_branch,
        should_pull=True,
    )


class SyncService:
    """
    Service for syncing an organization's repositories into a directory.

    Example:
        service = SyncService("/srv/org", GitClient())
        result = service.process_repo(repo)
        print(result.action.label)
    """

    def __init__(self, base_dir: str, git_client: Optional[GitClient] = None):
        """
        Initialize SyncService.

        Args:
            base_dir: Directory holding one clone per repository
            git_client: GitClient instance (creates new if None)
        """
        self.base_dir = base_dir
        self.git = git_client or GitClient()

    def repo_path(self, repo: RemoteRepository) -> str:
        return os.path.join(self.base_dir, repo.name)

    def clone_repo(self, repo: RemoteRepository) -> RepoResult:
        """Clone a missing repository, with submodules."""
        result = RepoResult(name=repo.name, default_branch=repo.default_branch)
        try:
            self.git.clone(repo.clone_url, self.repo_path(repo))
        except GitOperationError as e:
            result.action = RepoAction.CLONE_ERROR
            result.error = e
            return result

        result.action = RepoAction.CLONED
        return result

    def process_repo(self, repo: RemoteRepository) -> RepoResult:
        """
        Audit and sync an existing local clone.

        The first failing step ends processing and determines the error
        action; only the post-pull submodule update is allowed to fail.
        """
        path = self.repo_path(repo)
        result = RepoResult(name=repo.name, default_branch=repo.default_branch)

        try:
            self.git.fetch(path)
        except GitOperationError as e:
            return self._failed(result, RepoAction.FETCH_ERROR, e)

        # Uninitialized submodules would otherwise show up as dirty
        try:
            self.git.submodule_update(path)
        except GitOperationError as e:
            return self._failed(result, RepoAction.SUBMODULE_ERROR, e)

        try:
            branch = self.git.current_branch(path)
        except GitOperationError as e:
            return self._failed(result, RepoAction.FETCH_ERROR, e)
        result.current_branch = branch
        result.branch_drift = branch != repo.default_branch

        try:
            dirty, files = self.git.is_dirty(path)
        except GitOperationError as e:
            return self._failed(result, RepoAction.FETCH_ERROR, e)

        decision = decide_actions(dirty, branch, repo.default_branch)

        if decision.skip_reason:
            logger.debug(f"{repo.name}: {decision.skip_reason}, skipping checkout and pull")
            result.action = RepoAction.DIRTY
            result.dirty_files = files
            result.additions, result.deletions = self._diff_stats(path)
            return result

        if decision.should_checkout:
            try:
                self.git.checkout(path, repo.default_branch)
            except GitOperationError as e:
                return self._failed(result, RepoAction.CHECKOUT_ERROR, e)
            result.current_branch = repo.default_branch

        if decision.should_pull:
            try:
                result.updated = self.git.pull_ff(path)
            except GitOperationError as e:
                return self._failed(result, RepoAction.PULL_ERROR, e)

            # Realign submodule pointers with the pulled commits; a stale
            # pointer is picked up again on the next run.
            try:
                self.git.submodule_update(path)
            except GitOperationError as e:
                logger.debug(f"{repo.name}: post-pull submodule update failed: {e}")

        if result.branch_drift:
            result.action = RepoAction.BRANCH_DRIFT
        elif result.updated:
            result.action = RepoAction.UPDATED
        else:
            result.action = RepoAction.ALREADY_CURRENT
        return result

    def _failed(self, result: RepoResult, action: RepoAction, error: Exception) -> RepoResult:
        logger.debug(f"{result.name}: {action.value}: {error}")
        result.action = action
        result.error = error
        return result

    def _diff_stats(self, path: str) -> Tuple[int, int]:
        """Best-effort line counts for a dirty tree; zeros on failure."""
        try:
            return self.git.diff_stats(path)
        except GitOperationError as e:
            logger.debug(f"diff stats unavailable for {path}: {e}")
            return 0, 0

    def _work_items(
        self,
        scan: ScanResult,
        repos: Dict[str, RemoteRepository]
    ) -> List[Tuple[Callable[[RemoteRepository], RepoResult], RemoteRepository]]:
        """Clones first, then existing clones; each repository exactly once."""
        items = []
        seen = set()
        for names, handler in ((scan.managed_missing, self.clone_repo),
                               (scan.managed_found, self.process_repo)):
            for name in names:
                if name in seen:
                    continue
                seen.add(name)
                items.append((handler, repos[name]))
        return items

    def run(
        self,
        scan: ScanResult,
        repos: Iterable[RemoteRepository],
        jobs: int = 1,
        on_result: Optional[Callable[[RepoResult], None]] = None
    ) -> List[RepoResult]:
        """
        Clone every missing repository and process every found one.

        Args:
            scan: Result of scan_directory
            repos: Included repositories (looked up by name)
            jobs: Number of concurrent repositories (1 = sequential)
            on_result: Called on this thread once per finished repository

        Returns:
            Results in scan order (clones first), regardless of ``jobs``

        Raises:
            KeyboardInterrupt: after cancelling queued work; results of
                repositories that never ran are not reported
        """
        by_name = {r.name: r for r in repos}
        items = self._work_items(scan, by_name)

        if jobs <= 1 or len(items) <= 1:
            return self._run_sequential(items, on_result)
        return self._run_parallel(items, jobs, on_result)

    def _run_sequential(self, items, on_result) -> List[RepoResult]:
        results = []
        for handler, repo in items:
            result = handler(repo)
            results.append(result)
            if on_result:
                on_result(result)
        return results

    def _run_parallel(self, items, jobs, on_result) -> List[RepoResult]:
        slots: List[Optional[RepoResult]] = [None] * len(items)

        with ThreadPoolExecutor(max_workers=jobs) as executor:
            futures = {
                executor.submit(handler, repo): index
                for index, (handler, repo) in enumerate(items)
            }
            try:
                for future in as_completed(futures):
                    result = future.result()
                    slots[futures[future]] = result
                    if on_result:
                        on_result(result)
            except BaseException:
                # Queued repositories never start; running ones finish
                logger.warning("Stopping, waiting for running git commands to finish")
                executor.shutdown(wait=True, cancel_futures=True)
                raise

        return [r for r in slots if r is not None]
