"""
Progress reporting for ghorgsync.

A single "N/M repos" bar, advanced once per finished repository whatever
its outcome. Drawn only on interactive terminals; messages printed through
the same console appear above the bar.
"""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TaskProgressColumn,
    TextColumn,
)


class RepoProgress:
    """Progress bar for tracking repository completion."""

    def __init__(self, console: Console, enabled: Optional[bool] = None):
        """
        Args:
            console: Console that all report output goes through
            enabled: Explicitly enable/disable drawing. None = auto-detect
        """
        self.console = console
        self.enabled = console.is_terminal if enabled is None else enabled
        self.total = 0
        self.current = 0
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    @property
    def active(self) -> bool:
        return self._progress is not None

    def start(self, total: int) -> None:
        """Start a live bar for ``total`` repositories (no-op for zero)."""
        self.total = total
        self.current = 0
        if total <= 0 or not self.enabled:
            return
        self._progress = Progress(
            TextColumn("  [cyan]progress[/cyan]"),
            BarColumn(bar_width=28),
            TaskProgressColumn(),
            MofNCompleteColumn(),
            TextColumn("[dim]repos[/dim]"),
            console=self.console,
            transient=False,
        )
        self._task = self._progress.add_task("repos", total=total)
        self._progress.start()

    def advance(self) -> None:
        """Advance by one repository."""
        if self.current < self.total:
            self.current += 1
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, completed=self.current)

    def finish(self) -> None:
        """Render the completed bar and release the terminal line."""
        self.current = self.total
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, completed=self.total)
            self._progress.stop()
        self._progress = None
        self._task = None
