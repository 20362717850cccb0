"""Backup inspection commands.

Provides `shadowvault backups list` for showing the backup set of a file.
"""

import json
from typing import Annotated

import typer
from rich.markup import escape

from shadowvault.cli.display import create_backup_listing
from shadowvault.cli.types import get_manager
from shadowvault.lifecycle.errors import LifecycleError
from shadowvault.utils.formatting import console, print_error, print_info

app = typer.Typer(
    help="Inspect backup sets.",
    no_args_is_help=True,
)


@app.command(name="list")
def list_backups(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Path of the managed file.")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """List the backups of a file, oldest first.

    Examples:
        shadowvault backups list /data/x/f
        shadowvault backups list /data/x/f --json
    """
    manager = get_manager(ctx)
    try:
        backups = manager.list_backups(path)
    except LifecycleError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if json_output:
        typer.echo(json.dumps(backups, indent=2))
        return

    if not backups:
        print_info(f"No backups found for {escape(path)}.")
        return

    console.print(create_backup_listing(backups, title=f"Backups of {escape(path)}"))
