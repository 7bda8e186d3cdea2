"""Display utilities for docktidy using Rich."""

from collections import Counter

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docktidy import text as txt
from docktidy.models import DiskUsage, PruneCandidate, PruneResult, RiskLevel, format_size

RISK_STYLES = {
    RiskLevel.SAFE: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
}


def display_disk_usage(console: Console, usage: DiskUsage | None, text: txt.Text) -> None:
    """Display disk usage rows in a rich table.

    Args:
        console: Rich console instance
        usage: DiskUsage to display, None when the daemon was unreachable
        text: String table
    """
    if usage is None or not usage.rows:
        console.print(f"[dim]{text.get(txt.KEY_DASHBOARD_EMPTY)}[/]")
        return

    table = Table(title=text.get(txt.KEY_DASHBOARD_TITLE))
    table.add_column("Type", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Active", justify="right")
    table.add_column("Size", justify="right", style="magenta")
    table.add_column("Reclaimable", justify="right", style="green")

    for row in usage.rows:
        table.add_row(
            row.type,
            str(row.total),
            str(row.active),
            format_size(row.size_bytes),
            f"{format_size(row.reclaimable_bytes)} ({row.reclaimable_percent:.0f}%)",
        )

    console.print(table)
    console.print(f"\n[bold]Total reclaimable space:[/] {format_size(usage.reclaimable_bytes)}")


def display_candidates(console: Console, candidates: list[PruneCandidate], text: txt.Text) -> None:
    """Display prune candidates with their risk and reason."""
    if not candidates:
        console.print(f"\n[green]{text.get(txt.KEY_CANDIDATES_EMPTY)}[/]")
        return

    table = Table(title=text.get(txt.KEY_CANDIDATES_TITLE))
    table.add_column("#", style="dim", width=4)
    table.add_column("Type", style="cyan")
    table.add_column("Name")
    table.add_column("ID", style="dim")
    table.add_column("Days Unused", justify="right")
    table.add_column("Size", justify="right", style="magenta")
    table.add_column("Risk")
    table.add_column("Reason")

    for idx, candidate in enumerate(candidates, 1):
        style = RISK_STYLES[candidate.risk_level]
        table.add_row(
            str(idx),
            candidate.type.value,
            candidate.resource.name,
            candidate.resource.short_id,
            str(candidate.days_since_use),
            candidate.resource.size_human,
            f"[{style}]{candidate.risk_level.value}[/]",
            text.get(candidate.reason),
        )

    console.print(table)
    total = sum(c.size for c in candidates)
    console.print(f"\n[bold]Total reclaimable space:[/] {format_size(total)}")


def display_exclusions(console: Console, exclusions: Counter, text: txt.Text) -> None:
    """Display how many resources each exclusion rule kept out."""
    if not exclusions:
        return
    table = Table(title=text.get(txt.KEY_EXCLUSIONS_TITLE))
    table.add_column("Rule", style="yellow")
    table.add_column("Count", justify="right")
    for exclusion, count in sorted(exclusions.items(), key=lambda item: -item[1]):
        table.add_row(text.get(exclusion.value), str(count))
    console.print(table)


def display_prune_result(console: Console, result: PruneResult) -> None:
    """Display what was (or would be) removed and what failed."""
    mode = "Would remove" if result.dry_run else "Removed"
    console.print("\n[bold green]Done![/]")
    console.print(f"  {mode}: {result.resources_pruned} resources")
    console.print(f"  Space reclaimed: {format_size(result.space_reclaimed)}")
    if result.errors:
        console.print(f"  [red]Failed: {result.failed} resources[/]")
        for error in result.errors:
            console.print(f"    [red]✗[/] {escape(str(error))}")
