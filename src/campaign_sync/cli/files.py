"""
campaign-sync files / recipients - Inspect a Drive folder without writing.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from campaign_sync.cli.context import load_project, open_pipeline
from campaign_sync.exceptions import CampaignSyncError
from campaign_sync.retry import NETWORK_EXCEPTIONS
from campaign_sync.sync import describe_failure

files_app = typer.Typer(name="files", help="List files in a Drive folder", invoke_without_command=True)
recipients_app = typer.Typer(
    name="recipients", help="Download and parse every file in a Drive folder", invoke_without_command=True
)

console = Console()


@files_app.callback()
def files(
    ctx: typer.Context,
    folder: str | None = typer.Option(None, "--folder", "-f", help="Folder key (default: configured default)"),
    env: str | None = typer.Option(None, help="Environment"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Project directory"),
) -> None:
    """
    List the files a sync would walk, in processing order.
    """
    if ctx.invoked_subcommand is not None:
        return

    async def list_files():
        async with open_pipeline(config, project_dir, with_database=False) as pipeline:
            target = pipeline.coordinator.resolve_folder(folder)
            return target, await pipeline.coordinator.list_folder_files(folder)

    try:
        config = load_project(project_dir, env)
        target, drive_files = asyncio.run(list_files())
    except (CampaignSyncError, *NETWORK_EXCEPTIONS) as e:
        typer.echo(f"Error: {describe_failure(e)}", err=True)
        raise typer.Exit(1) from e

    table = Table(title=f"{escape(target.name)} ({len(drive_files)} files)", show_header=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("MIME type", style="green")
    table.add_column("ID", style="dim")
    for index, file in enumerate(drive_files):
        name = escape(file.name)
        if file.is_shortcut:
            name += " [yellow](shortcut)[/yellow]"
        table.add_row(str(index), name, file.mime_type, file.id)
    console.print(table)


@recipients_app.callback()
def recipients(
    ctx: typer.Context,
    folder: str | None = typer.Option(None, "--folder", "-f", help="Folder key (default: configured default)"),
    env: str | None = typer.Option(None, help="Environment"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Project directory"),
) -> None:
    """
    Parse every file in the folder and show recipient counts by market.
    """
    if ctx.invoked_subcommand is not None:
        return

    async def fetch():
        async with open_pipeline(config, project_dir, with_database=False) as pipeline:
            return await pipeline.coordinator.fetch_recipients(folder)

    try:
        config = load_project(project_dir, env)
        parsed = asyncio.run(fetch())
    except (CampaignSyncError, *NETWORK_EXCEPTIONS) as e:
        typer.echo(f"Error: {describe_failure(e)}", err=True)
        raise typer.Exit(1) from e

    by_market = Counter(r.market or "(none)" for r in parsed)
    table = Table(title=f"Recipients ({len(parsed)})", show_header=True)
    table.add_column("Market", style="cyan")
    table.add_column("Recipients", style="green", justify="right")
    for market, count in by_market.most_common():
        table.add_row(escape(market), str(count))
    console.print(table)
