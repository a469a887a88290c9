"""Rich terminal display for diskcleaner."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from diskcleaner.categories import CategoryDefinition
from diskcleaner.models import ApplyResult, ItemStatus, ScanReport
from diskcleaner.report import category_breakdown
from diskcleaner.sizes import humanize

console = Console()

TOP_ITEMS = 10


def status_label(status: ItemStatus) -> str:
    """Get styled label for an item status."""
    labels = {
        ItemStatus.DRY_PREVIEWED: "[cyan]would remove[/cyan]",
        ItemStatus.TRASHED: "[green]trashed[/green]",
        ItemStatus.DELETED: "[green]deleted[/green]",
        ItemStatus.MISSING: "[yellow]missing[/yellow]",
        ItemStatus.OUT_OF_SCOPE: "[yellow]outside home[/yellow]",
        ItemStatus.DENY_LISTED: "[yellow]deny-listed[/yellow]",
        ItemStatus.ERROR: "[red]error[/red]",
    }
    return labels.get(status, "?")


def format_size(size_bytes: int) -> str:
    """Format bytes to a human-readable string."""
    return humanize(size_bytes)


def show_report(report: ScanReport) -> None:
    """Display a scan report: per-category totals and the largest items."""
    table = Table(title="Scan Summary", show_header=True, header_style="bold")
    table.add_column("Category")
    table.add_column("Items", justify="right")
    table.add_column("Size", justify="right")

    for category, totals in category_breakdown(report).items():
        table.add_row(category.value, str(totals.count), format_size(totals.bytes))

    console.print(table)

    if report.items:
        largest = sorted(report.items, key=lambda item: item.size_bytes, reverse=True)[:TOP_ITEMS]
        top = Table(title="Largest Items", show_header=True, header_style="bold")
        top.add_column("Size", justify="right")
        top.add_column("Category")
        top.add_column("Path")
        for item in largest:
            top.add_row(format_size(item.size_bytes), item.category.value, escape(item.path))
        console.print(top)

    console.print(
        Panel(
            f"[bold]Reclaimable:[/bold] {format_size(report.totals.bytes)} "
            f"in {report.totals.count} items",
            title="Summary",
            border_style="blue",
        )
    )


def show_apply_result(result: ApplyResult) -> None:
    """Display the outcome of an apply call."""
    summary = result.summary
    if summary.dry_run:
        console.print("[yellow]DRY RUN - No files were modified[/yellow]\n")

    table = Table(title="Cleanup Results", show_header=True, header_style="bold")
    table.add_column("Status")
    table.add_column("Size", justify="right")
    table.add_column("Path")

    for outcome in result.details:
        size = format_size(outcome.bytes) if outcome.bytes is not None else ""
        path = escape(outcome.path)
        if outcome.error:
            path += f"\n[red]{escape(outcome.error)}[/red]"
        table.add_row(status_label(outcome.status), size, path)

    console.print(table)

    verb = "Would free" if summary.dry_run else "Freed"
    console.print(
        f"\n[bold]{verb}: {summary.human_readable_size}[/bold] "
        f"({summary.count} items, mode: {summary.mode.value})"
    )
    failures = result.by_status(ItemStatus.ERROR)
    if failures:
        console.print(f"[red]{len(failures)} items failed[/red]")


def show_categories(categories: list[CategoryDefinition]) -> None:
    """List categories with their roots."""
    console.print("[bold]Available Categories[/bold]\n")
    for definition in categories:
        console.print(f"• [bold]{definition.id.value}[/bold] - {definition.name}")
        console.print(f"  [dim]{definition.description}[/dim]")
        for root in definition.roots:
            where = root.path or f"$({' '.join(root.command)})"
            console.print(f"    {escape(where)}  [dim]({root.reason})[/dim]")
        console.print()


def show_scanning_progress() -> Progress:
    """Create a spinner for scanning."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def confirm_action(message: str) -> bool:
    """Ask for confirmation."""
    from rich.prompt import Confirm

    return Confirm.ask(message)
