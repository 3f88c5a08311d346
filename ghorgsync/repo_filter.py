"""
Repository filtering for ghorgsync.

Applies the visibility, archive and exclusion policy to the organization
inventory before anything touches the local filesystem.
"""

import logging
from typing import List, Tuple

from .config import Config
from .domain.repository import RemoteRepository

logger = logging.getLogger(__name__)


def filter_repos(
    repos: List[RemoteRepository],
    config: Config
) -> Tuple[List[RemoteRepository], List[str]]:
    """
    Split the inventory into included repositories and excluded names.

    Repositories hidden by the visibility flags land in neither list. Archived
    repositories (unless include_archived is set) and names matching an
    exclude pattern are reported in ``excluded_names`` so that a local copy
    can later be recognized as excluded-but-present. Input order is kept.

    Args:
        repos: Remote inventory, in API order
        config: Sync policy

    Returns:
        Tuple of (included, excluded_names)
    """
    included: List[RemoteRepository] = []
    excluded_names: List[str] = []

    for repo in repos:
        if repo.is_private and not config.should_include_private():
            continue
        if not repo.is_private and not config.should_include_public():
            continue

        if repo.is_archived and not config.should_include_archived():
            excluded_names.append(repo.name)
            continue

        if config.is_excluded(repo.name):
            excluded_names.append(repo.name)
            continue

        included.append(repo)

    logger.debug(
        f"Filtered {len(repos)} repositories: "
        f"{len(included)} included, {len(excluded_names)} excluded"
    )
    return included, excluded_names
