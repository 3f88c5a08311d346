"""
Rendering functions for ghorgsync output.

This module handles all pretty-printing of a sync run. The services return
data; a Reporter instance, created per run and passed to the CLI flow,
turns it into human-readable lines or JSONL records.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from .domain.operation import RepoAction, RepoResult, Summary
from .domain.repository import LocalClassification, LocalEntry
from .progress import RepoProgress


def should_color(no_color: bool = False) -> bool:
    """Colour only on a terminal, and never when NO_COLOR is set."""
    if no_color or 'NO_COLOR' in os.environ:
        return False
    return sys.stdout.isatty()


def format_status_label(action: str) -> str:
    """Return the bracketed label for a repo action, e.g. ``[cloned]``."""
    return f"[{action}]"


def format_summary_line(summary: Summary) -> str:
    """Build the plain-text summary line."""
    return " | ".join(f"{label}: {value}" for label, value, _ in _summary_parts(summary))


def _summary_parts(summary: Summary):
    return [
        ("total", summary.total, None),
        ("cloned", summary.cloned, "green"),
        ("updated", summary.updated, "green"),
        ("dirty", summary.dirty, "yellow"),
        ("branch-drift", summary.branch_drift, "yellow"),
        ("unknown", summary.unknown_folders, "yellow"),
        ("excluded-but-present", summary.excluded_but_present, "yellow"),
        ("errors", summary.errors, "red"),
    ]


class Reporter:
    """
    Report writer for one run.

    Human mode prints coloured lines through a rich Console; JSON mode
    writes one JSON object per line to stdout and keeps the progress bar off.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        verbose: bool = False,
        json_output: bool = False,
        color: bool = True
    ):
        self.console = console or Console(
            no_color=not color,
            highlight=False,
            soft_wrap=True,
        )
        self.err_console = Console(stderr=True, no_color=not color, highlight=False, soft_wrap=True)
        self.verbose = verbose
        self.json_output = json_output
        self.progress = RepoProgress(self.console, enabled=False if json_output else None)

    def _emit(self, record: Dict[str, Any]) -> None:
        print(json.dumps(record, ensure_ascii=False), flush=True)

    def _repo_line(self, name: str, status: str, style: str, extra: str = "") -> None:
        line = f"  [cyan]repo[/cyan] [bold]{escape(name)}[/bold] [{style}]{escape(status)}[/{style}]"
        if extra:
            line += f" {extra}"
        self.console.print(line)

    # Progress

    def start_progress(self, total: int) -> None:
        self.progress.start(total)

    def advance_progress(self) -> None:
        self.progress.advance()

    def finish_progress(self) -> None:
        self.progress.finish()

    # Messages

    def info(self, message: str) -> None:
        if not self.json_output:
            self.console.print(escape(message))

    def debug(self, message: str) -> None:
        """Print only in verbose mode."""
        if self.verbose and not self.json_output:
            self.console.print(f"  [dim]{escape(message)}[/dim]")

    def repo_result(self, result: RepoResult) -> None:
        """Report one repository outcome."""
        if self.json_output:
            self._emit(result.to_dict())
            return

        action = result.action
        if action == RepoAction.CLONED:
            self._repo_line(result.name, action.label, "green")
        elif action == RepoAction.UPDATED:
            self._repo_line(result.name, action.label, "green")
        elif action == RepoAction.BRANCH_DRIFT:
            status = f"[branch-drift: checked out {result.default_branch}"
            status += ", updated]" if result.updated else "]"
            self._repo_line(result.name, status, "yellow")
        elif action == RepoAction.DIRTY:
            self._dirty(result)
        elif action == RepoAction.ALREADY_CURRENT:
            self.debug(f"{result.name} is already up to date")
        elif action.is_error:
            self._repo_line(result.name, action.label, "red", f"[red]{escape(str(result.error))}[/red]")

    def _dirty(self, result: RepoResult) -> None:
        branch_info = result.current_branch
        if result.current_branch != result.default_branch:
            branch_info = f"{result.current_branch} (default: {result.default_branch})"
        self._repo_line(result.name, RepoAction.DIRTY.label, "yellow", f"on {escape(branch_info)}")
        self.console.print("       [yellow]checkout/pull skipped due to dirty working tree[/yellow]")
        for f in result.dirty_files:
            self.console.print(f"       [dim]{escape('[' + f.label + ']')}[/dim] {escape(f.path)}")
        if result.additions or result.deletions:
            self.console.print(f"       [dim]+{result.additions} -{result.deletions} lines[/dim]")

    def collision(self, entry: LocalEntry) -> None:
        if self.json_output:
            self._emit({'type': 'finding', **entry.to_dict()})
            return
        self._repo_line(entry.name, "[collision]", "red", escape(entry.detail or ""))

    def folder(self, entry: LocalEntry) -> None:
        """Report an unknown or excluded-but-present folder."""
        if self.json_output:
            self._emit({'type': 'finding', **entry.to_dict()})
            return
        self.console.print(
            f"  [magenta]folder[/magenta] [bold]{escape(entry.name)}[/bold] "
            f"[yellow]{escape('[' + entry.classification.value + ']')}[/yellow]"
        )

    def findings(self, entries: List[LocalEntry]) -> None:
        for entry in entries:
            if entry.classification == LocalClassification.COLLISION:
                self.collision(entry)
            else:
                self.folder(entry)

    def summary(self, summary: Summary) -> None:
        if self.json_output:
            self._emit(summary.to_dict())
            return
        parts = []
        for label, value, color in _summary_parts(summary):
            text = f"{label}: {value}"
            parts.append(f"[{color}]{text}[/{color}]" if color and value > 0 else text)
        self.console.print()
        self.console.print("[bold]Summary:[/bold]")
        self.console.print("  " + " | ".join(parts))

    # Errors (always on stderr)

    def system_error(self, context: str, error: BaseException) -> None:
        self.err_console.print(
            f"  [red]system[/red] [bold]{escape(context)}[/bold] [red]{escape(str(error))}[/red]"
        )

    def config_error(self, error: BaseException) -> None:
        self.err_console.print(f"[red]config error:[/red] {escape(str(error))}")

    def auth_error(self, error: BaseException) -> None:
        self.system_error("authentication", error)

    def missing_dotfile(self, filename: str) -> None:
        self.console.print(
            f"No {escape(filename)} configuration file found in current directory. Nothing to do."
        )
