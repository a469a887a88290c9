"""CLI interface for diskcleaner."""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from diskcleaner import __version__
from diskcleaner.categories import get_all_categories, resolve_categories
from diskcleaner.config import CleanerConfig, load_config
from diskcleaner.display import (
    confirm_action,
    console,
    show_apply_result,
    show_categories,
    show_report,
    show_scanning_progress,
)
from diskcleaner.engine import CleanerEngine
from diskcleaner.exceptions import DiskCleanerError
from diskcleaner.log import setup_logging
from diskcleaner.models import ApplyMode, ScanOptions
from diskcleaner.plan import load_plan
from diskcleaner.report import report_to_json, write_report
from diskcleaner.sizes import parse_size

# Create Typer app
app = typer.Typer(
    name="diskcleaner",
    help="Safe macOS home directory cleanup - scan, review, then trash or delete",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"diskcleaner version {__version__}")
        raise typer.Exit()


def _fail(error: Exception) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(1)


def _config(ctx: typer.Context) -> CleanerConfig:
    return ctx.obj["config"]


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", help="Config file (default ~/.diskcleaner/config.json)"
    ),
    log: Optional[Path] = typer.Option(
        None, "--log", help="Log file path (default ~/Library/Logs/disk_cleaner.log)"
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose output"),
) -> None:
    """diskcleaner - safe macOS home directory cleanup."""
    try:
        config = load_config(config_file)
    except DiskCleanerError as e:
        _fail(e)

    if no_color:
        console.no_color = True
    setup_logging(log or config.log_file, verbose=verbose, no_color=no_color)
    ctx.obj = {"config": config}


@app.command()
def scan(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write report JSON to FILE"),
    to_downloads: bool = typer.Option(
        False,
        "--to-downloads",
        help="Write report to ~/Downloads/disk_cleaner_report-YYYYmmdd-HHMMSS.json",
    ),
    min_size: Optional[str] = typer.Option(
        None, "--min-size", help="Only include files >= size (e.g. 50M, 1G)"
    ),
    older_than: Optional[float] = typer.Option(
        None, "--older-than", min=0, help="Only include files not modified for DAYS"
    ),
    include: Optional[str] = typer.Option(
        None, "--include", help="Comma list: user-caches,browsers,dev,pkg,downloads,docker,deep"
    ),
    exclude: Optional[str] = typer.Option(None, "--exclude", help="Comma list to exclude"),
    downloads: bool = typer.Option(False, "--downloads", help="Also scan ~/Downloads"),
    docker: bool = typer.Option(False, "--docker", help="Select the (reserved) docker category"),
    easy: bool = typer.Option(
        False, "--easy", help="Safe defaults: --downloads, --min-size 50M, --older-than 30"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the report JSON to stdout"),
) -> None:
    """Scan for reclaimable files and write a report."""
    config = _config(ctx)

    try:
        if easy:
            downloads = True
            min_size_bytes = parse_size(min_size) if min_size else config.default_min_size_bytes
            if older_than is None:
                older_than = config.default_min_age_days
        else:
            min_size_bytes = parse_size(min_size) if min_size else 0

        categories = resolve_categories(include, exclude, downloads=downloads, docker=docker)
        options = ScanOptions(
            categories=categories,
            min_size_bytes=min_size_bytes,
            min_age_days=older_than or 0,
        )
        engine = CleanerEngine(config)

        with show_scanning_progress() as progress:
            task = progress.add_task("Scanning...", total=None)

            def update_progress(category: str, root: str) -> None:
                progress.update(task, description=f"Scanning {category}: {root}")

            report = engine.scan(options, progress_callback=update_progress)
    except DiskCleanerError as e:
        _fail(e)

    if as_json:
        typer.echo(report_to_json(report))
    else:
        show_report(report)

    if to_downloads and output is None:
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        output = config.home / "Downloads" / f"disk_cleaner_report-{stamp}.json"

    if output is not None:
        try:
            write_report(report, output)
        except OSError as e:
            _fail(e)
        console.print(f"[dim]Wrote: {output}[/dim]")


@app.command()
def apply(
    ctx: typer.Context,
    plan_file: Path = typer.Argument(
        ..., help="Plan exported from the UI (JSON) or a text file with one path per line"
    ),
    execute: bool = typer.Option(
        False, "--apply/--dry-run", help="Execute actions (default: preview only)"
    ),
    trash: Optional[bool] = typer.Option(
        None,
        "--trash/--no-trash",
        help="Move items to ~/.Trash (default) or delete them permanently",
    ),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompts"),
    as_json: bool = typer.Option(False, "--json", help="Print the result JSON to stdout"),
) -> None:
    """Apply a cleanup plan."""
    config = _config(ctx)
    dry_run = not execute

    try:
        plan = load_plan(plan_file)
    except DiskCleanerError as e:
        _fail(e)

    if trash is None:
        mode = plan.apply_mode or ApplyMode.TRASH
    else:
        mode = ApplyMode.TRASH if trash else ApplyMode.DELETE

    if mode == ApplyMode.DELETE and not dry_run and not yes:
        if not confirm_action(
            f"You are about to permanently delete {len(plan.items)} items. Continue?"
        ):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(1)

    try:
        result = CleanerEngine(config).apply(plan, mode=mode, dry_run=dry_run)
    except DiskCleanerError as e:
        _fail(e)

    if as_json:
        typer.echo(json.dumps(result.to_wire(), indent=2))
    else:
        show_apply_result(result)


@app.command(name="list")
def list_categories() -> None:
    """List all cleanup categories."""
    show_categories(get_all_categories())
    console.print("[dim]Run [bold]diskcleaner scan --include <categories>[/bold] to scan[/dim]")


if __name__ == "__main__":
    app()
