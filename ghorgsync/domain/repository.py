"""
Repository domain objects for ghorgsync.

RemoteRepository is one entry of the organization inventory; LocalEntry is a
classified child of the working directory. Both are immutable for the
duration of a run.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class RemoteRepository:
    """A repository from the remote organization inventory."""
    name: str
    clone_url: str = ""
    default_branch: str = "main"
    is_private: bool = False
    is_archived: bool = False

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'RemoteRepository':
        """Create from a GitHub `/orgs/{org}/repos` list item."""
        return cls(
            name=data.get('name', ''),
            clone_url=data.get('clone_url', ''),
            default_branch=data.get('default_branch') or 'main',
            is_private=bool(data.get('private', False)),
            is_archived=bool(data.get('archived', False)),
        )


class LocalClassification(Enum):
    """Classification of a local directory entry."""
    MANAGED = "managed"                            # Matches an included repo
    COLLISION = "collision"                        # Path exists but is not a valid clone
    EXCLUDED_BUT_PRESENT = "excluded-but-present"  # Matches an excluded name/pattern
    UNKNOWN = "unknown"                            # Matches nothing

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LocalEntry:
    """A classified local directory entry."""
    name: str
    classification: LocalClassification
    detail: Optional[str] = None  # e.g. collision reason

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'name': self.name,
            'classification': self.classification.value,
        }
        if self.detail:
            result['detail'] = self.detail
        return result


@dataclass(frozen=True)
class DirtyFile:
    """A single changed file in a dirty working tree."""
    path: str
    staged: bool = False
    unstaged: bool = False

    @property
    def label(self) -> str:
        if self.staged and self.unstaged:
            return "staged+unstaged"
        if self.staged:
            return "staged"
        return "unstaged"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'staged': self.staged,
            'unstaged': self.unstaged,
        }
