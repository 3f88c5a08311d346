"""Git output parsing helpers."""

from .utils import parse_git_status, parse_numstat

__all__ = ['parse_git_status', 'parse_numstat']
