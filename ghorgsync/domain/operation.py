"""
Operation result domain objects for ghorgsync.

Provides the outcome taxonomy for a synchronization run: the per-repository
RepoAction/RepoResult, the ephemeral Decision computed before touching a
working tree, and the Summary folded over all results for the final report.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .repository import DirtyFile


class RepoAction(Enum):
    """Action taken (or finding) for a single repository."""
    NONE = "none"
    CLONED = "cloned"                    # Repository was cloned
    UPDATED = "updated"                  # Pull brought new commits
    ALREADY_CURRENT = "up-to-date"       # Nothing to pull
    DIRTY = "dirty"                      # Uncommitted changes, left alone
    BRANCH_DRIFT = "branch-drift"        # Was on another branch, checked out default
    CLONE_ERROR = "clone-error"
    FETCH_ERROR = "fetch-error"
    CHECKOUT_ERROR = "checkout-error"
    PULL_ERROR = "pull-error"
    SUBMODULE_ERROR = "submodule-error"

    @property
    def label(self) -> str:
        """Bracketed status label used in reports, e.g. ``[cloned]``."""
        return f"[{self.value}]"

    @property
    def is_error(self) -> bool:
        return self in _ERROR_ACTIONS

    def __str__(self) -> str:
        return self.value


_ERROR_ACTIONS = frozenset({
    RepoAction.CLONE_ERROR,
    RepoAction.FETCH_ERROR,
    RepoAction.CHECKOUT_ERROR,
    RepoAction.PULL_ERROR,
    RepoAction.SUBMODULE_ERROR,
})


@dataclass(frozen=True)
class Decision:
    """Which git operations to run for a repository in its current state."""
    should_fetch: bool = True
    should_checkout: bool = False
    should_pull: bool = False
    skip_reason: str = ""


@dataclass
class RepoResult:
    """
    Outcome of processing a single repository.

    ``branch_drift`` records the branch observed at the start of processing,
    whether or not a checkout later corrected it. ``updated`` is true only
    when a pull moved HEAD.
    """
    name: str
    action: RepoAction = RepoAction.NONE
    current_branch: str = ""
    default_branch: str = ""
    error: Optional[Exception] = None
    dirty_files: List[DirtyFile] = field(default_factory=list)
    additions: int = 0
    deletions: int = 0
    branch_drift: bool = False
    updated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            'type': 'repo',
            'name': self.name,
            'action': self.action.value,
            'current_branch': self.current_branch,
            'default_branch': self.default_branch,
            'branch_drift': self.branch_drift,
            'updated': self.updated,
        }
        if self.error is not None:
            result['error'] = str(self.error)
        if self.dirty_files:
            result['dirty_files'] = [f.to_dict() for f in self.dirty_files]
            result['additions'] = self.additions
            result['deletions'] = self.deletions
        return result


@dataclass
class Summary:
    """
    Aggregate counters for one run.

    Seed with ``from_scan`` and fold every RepoResult in with ``add_result``.
    """
    total: int = 0
    cloned: int = 0
    updated: int = 0
    dirty: int = 0
    branch_drift: int = 0
    unknown_folders: int = 0
    excluded_but_present: int = 0
    errors: int = 0

    @classmethod
    def from_scan(cls, total: int, scan) -> 'Summary':
        """Seed counters from the scan findings; collisions count as errors."""
        return cls(
            total=total,
            unknown_folders=len(scan.unknown),
            excluded_but_present=len(scan.excluded_but_present),
            errors=len(scan.collisions),
        )

    def add_result(self, result: RepoResult) -> None:
        """Fold one repository result into the counters."""
        action = result.action
        if action == RepoAction.CLONED:
            self.cloned += 1
        elif action == RepoAction.UPDATED:
            self.updated += 1
        elif action == RepoAction.DIRTY:
            self.dirty += 1
        elif action == RepoAction.BRANCH_DRIFT:
            self.branch_drift += 1
            if result.updated:
                self.updated += 1
        elif action.is_error:
            self.errors += 1

    @property
    def success(self) -> bool:
        """True if no errors were recorded."""
        return self.errors == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'summary',
            'total': self.total,
            'cloned': self.cloned,
            'updated': self.updated,
            'dirty': self.dirty,
            'branch_drift': self.branch_drift,
            'unknown_folders': self.unknown_folders,
            'excluded_but_present': self.excluded_but_present,
            'errors': self.errors,
        }
