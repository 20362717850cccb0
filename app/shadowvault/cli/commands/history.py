"""History command for viewing past lifecycle operations.

This module provides the `shadowvault history` command for viewing
the audit journal of retirements, renames and crushes.
"""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from shadowvault.core.state import StateManager
from shadowvault.models.history import HistoryActionType, HistoryEntry, PathRole
from shadowvault.utils.formatting import console, print_info

app = typer.Typer(
    name="history",
    help="View history of lifecycle operations.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            min=1,
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    action_type: Annotated[
        HistoryActionType | None,
        typer.Option(
            "--type",
            "-t",
            help="Only show entries of this operation type.",
            case_sensitive=False,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show history of lifecycle operations.

    Every operation run through shadowvault is recorded, including failed
    ones. Crush entries list the backups that were destroyed.

    Examples:
        shadowvault history              # Show last 20 entries
        shadowvault history -n 50        # Show last 50 entries
        shadowvault history -t crush     # Show crushes only
        shadowvault history --json       # Output as JSON
    """
    if ctx.invoked_subcommand is not None:
        return

    entries = StateManager().get_history(limit=limit, action_type=action_type)

    if not entries:
        print_info("No history entries found.")
        return

    if json_output:
        _print_json(entries)
    else:
        _print_table(entries)


def _print_table(entries: list[HistoryEntry]) -> None:
    """Print history as Rich table.

    Args:
        entries: List of history entries to display.
    """
    table = Table(
        title="Lifecycle History",
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", style="dim")
    table.add_column("Timestamp", style="info")
    table.add_column("Action", style="success")
    table.add_column("Path", style="text")
    table.add_column("Backups", justify="right", style="backup")
    table.add_column("OK?")

    for entry in entries:
        path = ", ".join(escape(p) for p in entry.paths(PathRole.ORIGIN))
        destinations = entry.paths(PathRole.DESTINATION)
        if destinations:
            path += " -> " + ", ".join(escape(p) for p in destinations)

        table.add_row(
            entry.id[:8],
            _format_timestamp(entry.timestamp),
            entry.action_type.value,
            path,
            str(len(entry.paths(PathRole.BACKUP))),
            "[success]Yes[/]" if entry.success else "[error]No[/]",
        )

    console.print(table)


def _format_timestamp(iso_timestamp: str) -> str:
    """Format ISO timestamp for display.

    Args:
        iso_timestamp: ISO format timestamp string.

    Returns:
        Formatted timestamp string (YYYY-MM-DD HH:MM).
    """
    dt = datetime.fromisoformat(iso_timestamp.replace("Z", "+00:00"))
    return dt.strftime("%Y-%m-%d %H:%M")


def _print_json(entries: list[HistoryEntry]) -> None:
    """Print history as JSON.

    Args:
        entries: List of history entries to output.
    """
    output = [entry.to_dict() for entry in entries]
    typer.echo(json.dumps(output, indent=2))
