"""
Human-readable output formatting.

Centralizes CLI output for the run summary.
"""
from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models import OutcomeStatus
from ..orchestrator import RunReport

_STATUS_STYLE = {
    OutcomeStatus.PULLED: "green",
    OutcomeStatus.FAILED: "red",
    OutcomeStatus.SKIPPED: "yellow",
}


def print_run_report(report: RunReport, console: Optional[Console] = None) -> None:
    """
    Print one row per chart request, then a totals line.

    Args:
        report: Report returned by the orchestrator
        console: Console to print to (defaults to stdout)
    """
    console = console or Console()
    if not report.outcomes:
        console.print("[dim]No charts configured[/]")
        return

    table = Table(title="Charts")
    table.add_column("Registry", style="cyan")
    table.add_column("Chart")
    table.add_column("Version")
    table.add_column("Status")
    table.add_column("Detail", overflow="fold")

    for outcome in report.outcomes:
        style = _STATUS_STYLE[outcome.status]
        detail = str(outcome.path) if outcome.path else (outcome.error or "")
        table.add_row(
            escape(outcome.registry_url),
            outcome.chart,
            outcome.version,
            f"[{style}]{outcome.status.value}[/]",
            escape(detail),
        )

    console.print(table)
    console.print(
        f"[bold]Pulled:[/] {len(report.pulled)}  [bold]Failed:[/] {len(report.failed)}"
    )
