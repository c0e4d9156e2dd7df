"""
campaign-sync run - Sync recipient CSVs from Drive into campaigns.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from campaign_sync.cli.context import load_project, open_pipeline
from campaign_sync.exceptions import CampaignSyncError
from campaign_sync.retry import NETWORK_EXCEPTIONS
from campaign_sync.sync import SyncResult, SyncSummary, describe_failure, sync_all, trigger_sync
from campaign_sync.utils.logging import get_logger

logger = get_logger("campaign_sync.cli.run")

app = typer.Typer(name="run", help="Sync campaign recipients from Google Drive", invoke_without_command=True)

console = Console()


@app.callback()
def run(
    ctx: typer.Context,
    folder: str | None = typer.Option(None, "--folder", "-f", help="Folder key (default: configured default)"),
    cursor: int = typer.Option(0, "--cursor", "-c", min=0, help="File index to start from"),
    batch_size: int | None = typer.Option(None, "--batch-size", "-b", min=1, help="Files per call"),
    max_runtime_ms: int | None = typer.Option(None, "--max-runtime-ms", min=1, help="Runtime budget per call"),
    run_all: bool = typer.Option(False, "--all", "-a", help="Keep calling until the folder is covered"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Match and parse but keep recipients in memory"),
    env: str | None = typer.Option(None, help="Environment (dev, staging, prod)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Project directory"),
) -> None:
    """
    Run one paginated sync call, or every call with --all.
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        config = load_project(project_dir, env, verbose)
        summary, next_cursor = asyncio.run(
            _run(config, project_dir, folder, cursor, batch_size, max_runtime_ms, run_all, dry_run)
        )
    except (CampaignSyncError, *NETWORK_EXCEPTIONS) as e:
        logger.error(f"Sync failed: {e}")
        typer.echo(f"Error: {describe_failure(e)}", err=True)
        raise typer.Exit(1) from e

    print_summary(summary, dry_run=dry_run)
    if summary.total_files == 0:
        console.print(
            f"[yellow]No files found in folder \"{escape(summary.folder_name)}\". "
            f"Ensure the folder contains CSVs and is shared with the API key.[/yellow]"
        )
    elif next_cursor is not None:
        console.print(f"[cyan]More files remain. Continue with --cursor {next_cursor}[/cyan]")


async def _run(config, project_dir, folder, cursor, batch_size, max_runtime_ms, run_all, dry_run):
    async with open_pipeline(config, project_dir, dry_run=dry_run) as pipeline:
        if run_all:
            summary = await sync_all(
                pipeline.coordinator,
                batch_size=batch_size,
                folder=folder,
                max_runtime_ms=max_runtime_ms,
                start=cursor,
                on_result=_report_progress,
            )
            return summary, None

        result = await trigger_sync(
            pipeline.coordinator,
            cursor=cursor,
            batch_size=batch_size,
            folder=folder,
            max_runtime_ms=max_runtime_ms,
        )
        return result.summary, result.next_cursor


def _report_progress(result: SyncResult) -> None:
    window = result.summary.processed_range
    console.print(
        f"[dim]Files {window.start}..{window.end} of {result.summary.total_files} "
        f"in {result.duration_ms}ms[/dim]"
    )


def print_summary(summary: SyncSummary, dry_run: bool = False) -> None:
    table = Table(title=f"Sync summary: {escape(summary.folder_name)}", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")

    window = summary.processed_range
    table.add_row("Total files", str(summary.total_files))
    table.add_row("Processed files", f"{summary.processed_files} ({window.start}..{window.end})")
    table.add_row("Matched files", str(summary.files_matched))
    table.add_row("Recipients parsed", str(summary.recipients_parsed))
    table.add_row("Inserted", str(summary.recipients_inserted))
    table.add_row("Updated", str(summary.recipients_updated))
    table.add_row("Already present", str(summary.recipients_existing))
    table.add_row("Duplicates in files", str(summary.recipients_duplicate))
    console.print(table)
    if dry_run:
        console.print("[yellow]Dry run: recipients were not written to the database[/yellow]")

    if summary.unmatched_files:
        console.print(f"\n[yellow]Unmatched files ({len(summary.unmatched_files)}):[/yellow]")
        for name in summary.unmatched_files:
            console.print(f"  {escape(name)}")

    if summary.failed_downloads:
        console.print(f"\n[red]Failed downloads ({len(summary.failed_downloads)}):[/red]")
        for failure in summary.failed_downloads:
            console.print(f"  {escape(failure.file_name)}: [dim]{escape(failure.reason)}[/dim]")
