"""Terminal output for batch results using rich."""

from typing import List

from rich.console import Console
from rich.table import Table

from ..models.records import BatchResult, Category
from ..services.progress import ProgressSnapshot


def count_records(categories: List[Category]) -> int:
    return sum(len(c.items) for c in categories)


def count_with_icon(categories: List[Category]) -> int:
    return sum(1 for c in categories for item in c.items if item.icon)


def print_progress(console: Console, snapshot: ProgressSnapshot) -> None:
    console.print(f"[dim]{snapshot.describe()}[/dim]")


def print_summary(
    console: Console,
    result: BatchResult,
    categories: List[Category],
    max_examples: int = 10,
) -> None:
    """Print statistics and failures grouped by category.

    At most ``max_examples`` failures are listed per category; the rest
    are collapsed into a count.
    """
    console.print(f"\n[green]Done in {result.elapsed:.2f}s[/green]")

    table = Table(title="Statistics", show_header=True, header_style="bold")
    table.add_column("Total", justify="right")
    table.add_column("With icon", justify="right")
    table.add_column("Updated", justify="right")
    table.add_column("Unchanged", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Fields written", justify="right")
    table.add_row(
        str(count_records(categories)),
        str(count_with_icon(categories)),
        str(len(result.updated)),
        str(len(result.unchanged)),
        str(len(result.skipped)),
        str(len(result.failed)),
        str(result.changed_field_count),
    )
    console.print(table)

    if not result.failed:
        if result.processed_count:
            console.print("[green]All processed applications succeeded![/green]")
        return

    console.print(f"\n[red]Failed: {len(result.failed)} applications[/red]")
    for category, items in result.failures_by_category().items():
        console.print(f"\n[yellow]{category.title} ({len(items)})[/yellow]")
        shown = items[:max_examples]
        for index, item in enumerate(shown, start=1):
            console.print(f"  {index}. {item.name}: {item.error}", markup=False, highlight=False)
        if len(items) > len(shown):
            console.print(f"  ... and {len(items) - len(shown)} more")
