"""
Domain layer for ghorgsync.

Contains pure domain objects with no I/O or side effects:
- RemoteRepository: One entry of the organization inventory
- LocalEntry: A classified child of the working directory
- RepoResult: What happened to one repository during a run
- Summary: Aggregate counters for the final report
"""

from .repository import RemoteRepository, LocalClassification, LocalEntry, DirtyFile
from .operation import RepoAction, RepoResult, Decision, Summary

__all__ = [
    'RemoteRepository',
    'LocalClassification',
    'LocalEntry',
    'DirtyFile',
    'RepoAction',
    'RepoResult',
    'Decision',
    'Summary',
]
