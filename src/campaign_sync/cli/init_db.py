"""
campaign-sync init-db - Create the recipient schema in the configured database.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from campaign_sync.cli.context import load_project
from campaign_sync.exceptions import CampaignSyncError
from campaign_sync.store import add_campaign, connect_backend, initialize_schema

app = typer.Typer(name="init-db", help="Create database tables and seed campaigns", invoke_without_command=True)

console = Console()


@app.callback()
def init_db(
    ctx: typer.Context,
    campaigns: list[str] | None = typer.Option(None, "--campaign", help="Campaign name to seed (repeatable)"),
    env: str | None = typer.Option(None, help="Environment"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Project directory"),
) -> None:
    """
    Create the campaign and recipient tables if they don't exist.
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        config = load_project(project_dir, env)
        backend = connect_backend(config.database, project_dir)
        try:
            initialize_schema(backend)
            for name in campaigns or []:
                campaign = add_campaign(backend, name)
                console.print(f"Added campaign [cyan]{campaign.name}[/cyan] ({campaign.id})")
        finally:
            backend.disconnect()
    except CampaignSyncError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    console.print(f"[green]Schema ready[/green] ({config.database.get('type', 'duckdb')})")
