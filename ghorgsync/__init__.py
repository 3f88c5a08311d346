"""
ghorgsync - Keep a directory of git clones in sync with a GitHub organization.

For every repository of the organization, ghorgsync decides whether it
belongs in the directory, whether it is present and healthy, and which
action brings it up to date: clone, fetch, checkout, fast-forward pull, or
flag as dirty.

Quick Start:
    from ghorgsync import (
        load_config, filter_repos, scan_directory, SyncService, Summary,
    )
    from ghorgsync.infra import GitHubClient, resolve_token

    config = load_config(".ghorgsync")
    config.validate()

    repos = GitHubClient(resolve_token()).list_org_repos(config.organization)
    included, excluded = filter_repos(repos, config)
    scan = scan_directory(".", included, excluded, config)

    summary = Summary.from_scan(len(included), scan)
    for result in SyncService(".").run(scan, included):
        summary.add_result(result)

Domain Objects:
    RemoteRepository - One entry of the organization inventory
    LocalEntry - A classified child of the working directory
    RepoResult - What happened to one repository
    Summary - Aggregate counters for the report
"""

__version__ = "0.3.0"

from .config import Config, load_config
from .domain import (
    RemoteRepository,
    LocalClassification,
    LocalEntry,
    DirtyFile,
    RepoAction,
    RepoResult,
    Decision,
    Summary,
)
from .repo_filter import filter_repos
from .services import ScanResult, classify_entry, scan_directory, SyncService, decide_actions
from .git_ops import parse_git_status

__all__ = [
    "__version__",
    # Configuration
    "Config",
    "load_config",
    # Domain objects
    "RemoteRepository",
    "LocalClassification",
    "LocalEntry",
    "DirtyFile",
    "RepoAction",
    "RepoResult",
    "Decision",
    "Summary",
    # Core operations
    "filter_repos",
    "ScanResult",
    "classify_entry",
    "scan_directory",
    "SyncService",
    "decide_actions",
    "parse_git_status",
]
