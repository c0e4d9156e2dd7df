"""
Main CLI entry point.
"""

import typer

from campaign_sync import __version__
from campaign_sync.cli import files, init_db, run


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"campaign-sync version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="campaign-sync",
    help="campaign-sync - Sync campaign recipient CSVs from Google Drive",
    add_completion=True,
)

app.add_typer(run.app, name="run")
app.add_typer(files.files_app, name="files")
app.add_typer(files.recipients_app, name="recipients")
app.add_typer(init_db.app, name="init-db")


@app.callback(invoke_without_command=True)
def entrypoint(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """
    campaign-sync - Sync campaign recipient CSVs from Google Drive.

    Run 'campaign-sync <command> --help' for help on a specific command.
    """
    if ctx.invoked_subcommand is None and not version:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
