"""
Reporting and output formatting for dependency check results.

Provides color-coded console output using Rich library, and a JSON form for
automation.
"""

from typing import Any, Dict, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .checker import CheckReport, CheckStatus

STATUS_STYLES = {
    CheckStatus.SATISFIED: ("✅", "green"),
    CheckStatus.UNSATISFIED: ("⚠️ ", "yellow"),
    CheckStatus.MISSING: ("❌", "red"),
    CheckStatus.ERROR: ("❓", "magenta"),
}


class CheckReporter:
    """Formats and displays dependency check results."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_report(self, report: CheckReport, source: str) -> None:
        """
        Print check results in a user-friendly format.

        Args:
            report: The check report to display
            source: Manifest path or other label for the checked set
        """
        self.console.print()
        self.console.print(
            Panel(
                f"🔍 Tool Requirements: {source}",
                title="[bold blue]dep-requires[/bold blue]",
                border_style="blue",
            )
        )

        if not report.results:
            self.console.print("ℹ️  No tools declared.", style="yellow")
            return

        self._print_summary(report)
        self._print_results(report)
        self._print_footer(report)

    def _print_summary(self, report: CheckReport) -> None:
        table = Table(title="📊 Summary", box=box.ROUNDED, title_style="bold cyan")
        table.add_column("Status", style="bold")
        table.add_column("Count", justify="center")

        for status in CheckStatus:
            count = len(report.by_status(status))
            if count:
                icon, color = STATUS_STYLES[status]
                table.add_row(f"{icon} {status.value}", f"[{color}]{count}[/{color}]")

        self.console.print(table)
        self.console.print()

    def _print_results(self, report: CheckReport) -> None:
        table = Table(box=box.SIMPLE_HEAVY, show_header=True, header_style="bold")
        table.add_column("Tool", style="bold")
        table.add_column("Required")
        table.add_column("Found")
        table.add_column("Status")
        table.add_column("Details", style="dim")

        for result in report.results:
            _, color = STATUS_STYLES[result.status]
            table.add_row(
                result.dependency.name,
                result.dependency.requirement,
                result.found_version or "-",
                f"[{color}]{result.status.value}[/{color}]",
                result.message,
            )

        self.console.print(table)

    def _print_footer(self, report: CheckReport) -> None:
        if report.all_satisfied:
            self.console.print(
                f"✅ All {report.total} requirements satisfied "
                f"({report.duration_ms}ms)",
                style="bold green",
            )
        else:
            self.console.print(
                f"❌ {len(report.failures)} of {report.total} requirements not met "
                f"({report.duration_ms}ms)",
                style="bold red",
            )


def report_to_dict(report: CheckReport, source: str) -> Dict[str, Any]:
    """Render a check report as a JSON-serializable dictionary."""
    return {
        "source": source,
        "total_dependencies": report.total,
        "duration_ms": report.duration_ms,
        "all_satisfied": report.all_satisfied,
        "summary": {
            status.value.lower(): len(report.by_status(status))
            for status in CheckStatus
        },
        "results": [
            {
                "name": result.dependency.name,
                "requirement": result.dependency.requirement,
                "status": result.status.value,
                "path": result.path,
                "found_version": result.found_version,
                "message": result.message,
            }
            for result in report.results
        ],
    }
