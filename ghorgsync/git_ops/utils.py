"""
Git output parsing utilities.

Pure functions over the text that git prints; no subprocesses here.
"""

from typing import List, Tuple

from ..domain.repository import DirtyFile


def parse_git_status(output: str) -> List[DirtyFile]:
    """Parse git status output into DirtyFile entries.

    Args:
        output: Output from 'git status --porcelain'

    Returns:
        One DirtyFile per changed path, in output order
    """
    if not output:
        return []

    files = []
    for line in output.splitlines():
        if len(line) < 4:
            continue

        index_code = line[0]
        worktree_code = line[1]
        path = line[3:].strip()

        files.append(DirtyFile(
            path=path,
            staged=index_code not in (' ', '?'),
            unstaged=worktree_code != ' ' or index_code == '?',
        ))

    return files


def parse_numstat(output: str) -> Tuple[int, int]:
    """Sum added/deleted line counts from 'git diff --numstat' output.

    Binary files report '-' and are ignored.

    Returns:
        Tuple of (additions, deletions)
    """
    additions = 0
    deletions = 0

    for line in output.strip().split('\n') if output else []:
        fields = line.split()
        if len(fields) < 2:
            continue

        if fields[0] != '-':
            try:
                additions += int(fields[0])
            except ValueError:
                pass
        if fields[1] != '-':
            try:
                deletions += int(fields[1])
            except ValueError:
                pass

    return additions, deletions
