"""Rich formatting helpers for the histdb CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from histdb.pipeline import COMMITS_STAGE, REFERENCES_STAGE

if TYPE_CHECKING:
    from histdb.pipeline import ExportResult, StageResult

_STAGE_BANNERS = {
    COMMITS_STAGE: "Getting Commit Details...",
    REFERENCES_STAGE: "Getting Ref Details...",
}


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)


def format_created(location: str, console: Console) -> None:
    console.print("Database and tables created successfully!")
    console.print(f"  [dim]{escape(location)}[/dim]", highlight=False)


def format_summary(result: ExportResult, console: Console) -> None:
    """Display per-stage totals as a table."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Stage")
    table.add_column("Written", justify="right", style="green")
    table.add_column("Relations", justify="right", style="cyan")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Chunks", justify="right", style="dim")

    table.add_row(
        COMMITS_STAGE,
        str(result.commits.written),
        str(result.commits.relations),
        str(result.commits.skipped),
        str(result.commits.chunks),
    )
    table.add_row(
        REFERENCES_STAGE,
        str(result.references.written),
        "-",
        str(result.references.skipped),
        str(result.references.chunks),
    )

    console.print(table)


class ConsoleProgress:
    """ProgressReporter that prints status lines to a Rich console."""

    def __init__(self, console: Console, *, show_chunks: bool = False) -> None:
        self._console = console
        self._show_chunks = show_chunks

    def stage_started(self, stage: str) -> None:
        self._console.print(_STAGE_BANNERS.get(stage, f"Exporting {stage}..."))

    def chunk_committed(self, stage: str, index: int, size: int) -> None:
        if self._show_chunks:
            self._console.print(
                f"  [dim]{stage} chunk {index + 1}: {size} records[/dim]",
                highlight=False,
            )

    def stage_finished(self, stage: str, result: StageResult) -> None:
        if result.skipped:
            self._console.print(
                f"[yellow]Skipped {result.skipped} {stage}[/yellow]",
                highlight=False,
            )
        self._console.print("Done!")
