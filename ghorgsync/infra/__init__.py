"""
Infrastructure layer for ghorgsync.

Contains abstractions for external systems:
- GitClient: Git command execution
- GitHubClient: GitHub API access

These provide clean interfaces that can be replaced in tests.
"""

from .git_client import GitClient, GitOutput
from .github_client import GitHubClient, resolve_token

__all__ = [
    'GitClient',
    'GitOutput',
    'GitHubClient',
    'resolve_token',
]
