"""Shared Rich display functions for lifecycle results.

Provides the result printer and backup table builders used across the
file, dir and backups commands.
"""

import os
from datetime import datetime

from rich.markup import escape
from rich.table import Table

from shadowvault.lifecycle.models import LifecycleResult, OperationType
from shadowvault.utils.formatting import (
    console,
    create_backups_table,
    format_size,
    print_error,
    print_success,
)

_VERBS: dict[OperationType, str] = {
    OperationType.UPLOAD: "Created",
    OperationType.UPDATE: "Updated",
    OperationType.DELETE: "Deleted",
    OperationType.COPY: "Copied",
    OperationType.RENAME: "Renamed",
    OperationType.CRUSH: "Crushed",
    OperationType.DIR_DELETE: "Deleted directory",
    OperationType.DIR_RENAME: "Renamed directory",
}


def create_swept_table(result: LifecycleResult) -> Table:
    """Create a table listing the backups a sweep processed.

    Args:
        result: Result of a crush or rename.

    Returns:
        Rich Table with one row per processed backup.
    """
    crushed = result.operation == OperationType.CRUSH
    table = Table(
        title="Crushed Backups" if crushed else "Renamed Backups",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Backup", no_wrap=True)

    style = "crushed" if crushed else "backup"
    for path in result.swept:
        table.add_row(f"[{style}]✓[/]", f"[{style}]{escape(path)}[/]")

    return table


def create_backup_listing(backups: list[str], title: str = "Backups") -> Table:
    """Create a table of backups with their sizes and modification times.

    Backups that disappear while listing are shown without details.

    Args:
        backups: Backup paths, already sorted.
        title: Table title.

    Returns:
        Populated Rich Table.
    """
    table = create_backups_table(title)
    for path in backups:
        try:
            st = os.stat(path)
        except OSError:
            table.add_row(path, "-", "-")
            continue
        modified = datetime.fromtimestamp(st.st_mtime).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(path, format_size(st.st_size), modified)
    return table


def print_result(result: LifecycleResult, quiet: bool = False) -> None:
    """Print the outcome of a lifecycle task.

    Failures are always printed, including the backups already processed
    when a sweep stopped part way.

    Args:
        result: Result to print.
        quiet: Suppress output for successful tasks.
    """
    if result.failed:
        error = escape(result.error or "unknown error")
        print_error(f"{result.operation.value} failed for {escape(result.path)}: {error}")
        if result.swept:
            console.print(
                f"[warning]{len(result.swept)} backup(s) were processed before the failure:[/]"
            )
            console.print(create_swept_table(result))
        return

    if quiet:
        return

    print_success(f"{_VERBS[result.operation]} {escape(result.path)}")
    if result.backup_path:
        console.print(f"  [muted]backup:[/] [backup]{escape(result.backup_path)}[/]")
    if result.swept:
        console.print(create_swept_table(result))
