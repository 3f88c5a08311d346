"""
Local directory scanning for ghorgsync.

Classifies every immediate child of the working directory against the
included repositories and the exclusion policy, and works out which
included repositories still need to be cloned.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Collection, List, Optional

from ..config import Config
from ..domain.repository import LocalClassification, LocalEntry, RemoteRepository
from ..exit_codes import DirectoryReadError

logger = logging.getLogger(__name__)

FILE_COLLISION = "path is a file, not a directory"
NOT_A_REPO_COLLISION = "directory exists but is not a git repository"


@dataclass
class ScanResult:
    """Consolidated result of scanning the working directory."""
    managed_found: List[str] = field(default_factory=list)     # present, valid clones
    managed_missing: List[str] = field(default_factory=list)   # clone candidates
    collisions: List[LocalEntry] = field(default_factory=list)
    unknown: List[LocalEntry] = field(default_factory=list)
    excluded_but_present: List[LocalEntry] = field(default_factory=list)

    def findings(self) -> List[LocalEntry]:
        """All non-managed entries, in report order."""
        return self.collisions + self.unknown + self.excluded_but_present


def classify_entry(
    name: str,
    is_dir: bool,
    is_git_repo: bool,
    included: Collection[str],
    is_excluded: Callable[[str], bool]
) -> Optional[LocalEntry]:
    """
    Classify a single directory entry.

    Args:
        name: Entry name
        is_dir: Whether the entry is a directory
        is_git_repo: Whether it contains a .git directory (only used for directories)
        included: Names of included repositories
        is_excluded: Predicate for excluded names

    Returns:
        LocalEntry, or None for a plain file that no repository claims
    """
    if not is_dir:
        if name in included:
            return LocalEntry(name, LocalClassification.COLLISION, FILE_COLLISION)
        return None

    if name in included:
        if not is_git_repo:
            return LocalEntry(name, LocalClassification.COLLISION, NOT_A_REPO_COLLISION)
        return LocalEntry(name, LocalClassification.MANAGED)

    if is_excluded(name):
        return LocalEntry(name, LocalClassification.EXCLUDED_BUT_PRESENT)

    return LocalEntry(name, LocalClassification.UNKNOWN)


def _has_git_dir(path: Path) -> bool:
    return (path / ".git").is_dir()


def scan_directory(
    directory: str,
    included: List[RemoteRepository],
    excluded_names: List[str],
    config: Config
) -> ScanResult:
    """
    Scan ``directory`` and classify each immediate child entry.

    Hidden entries are skipped unless their name is an included repository
    (e.g. an organization's ``.github`` repository). Every included name ends
    up in exactly one of managed_found, managed_missing or collisions.

    Args:
        directory: Working directory holding the clones
        included: Repositories that should exist locally
        excluded_names: Repository names excluded by policy
        config: Policy, for exclude-pattern matching of unknown names

    Returns:
        ScanResult

    Raises:
        DirectoryReadError: if the directory cannot be enumerated
    """
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise DirectoryReadError(f"reading directory {directory}: {e}") from e

    included_names = {r.name for r in included}
    excluded_set = set(excluded_names)

    def is_excluded(name: str) -> bool:
        return name in excluded_set or config.is_excluded(name)

    result = ScanResult()
    local_dirs = set()

    for entry in entries:
        name = entry.name
        if name.startswith('.') and name not in included_names:
            continue

        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            is_dir = False

        if is_dir:
            local_dirs.add(name)

        classified = classify_entry(
            name,
            is_dir,
            is_dir and _has_git_dir(Path(entry.path)),
            included_names,
            is_excluded,
        )
        if classified is None:
            continue

        kind = classified.classification
        if kind == LocalClassification.MANAGED:
            result.managed_found.append(name)
        elif kind == LocalClassification.COLLISION:
            result.collisions.append(classified)
        elif kind == LocalClassification.EXCLUDED_BUT_PRESENT:
            result.excluded_but_present.append(classified)
        else:
            result.unknown.append(classified)

    collided = {c.name for c in result.collisions}
    for repo in included:
        if repo.name not in local_dirs and repo.name not in collided:
            result.managed_missing.append(repo.name)

    logger.debug(
        f"Scanned {directory}: {len(result.managed_found)} found, "
        f"{len(result.managed_missing)} missing, {len(result.collisions)} collisions, "
        f"{len(result.unknown)} unknown, {len(result.excluded_but_present)} excluded"
    )
    return result
