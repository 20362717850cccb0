"""File lifecycle commands.

Provides the `shadowvault file` subcommands that retire, snapshot,
rename and crush managed files. Every command is recorded in history.
"""

from typing import Annotated

import typer

from shadowvault.cli.types import TargetChoice, build_task, run_task
from shadowvault.lifecycle.models import OperationType

app = typer.Typer(
    help="Retire, snapshot, rename and crush managed files.",
    no_args_is_help=True,
)

PathArg = Annotated[str, typer.Argument(help="Path of the managed file.")]


@app.command()
def upload(
    ctx: typer.Context,
    path: PathArg,
    size: Annotated[
        int,
        typer.Option("--size", "-s", min=0, help="Size of the new file in bytes."),
    ] = 0,
) -> None:
    """Create a new zero-filled file, creating missing directories."""
    run_task(
        ctx,
        build_task(operation=OperationType.UPLOAD, path=path, size=size),
        command="shadowvault file upload",
    )


@app.command()
def update(
    ctx: typer.Context,
    path: PathArg,
    size: Annotated[
        int,
        typer.Option("--size", "-s", min=0, help="Size of the replacement file in bytes."),
    ] = 0,
) -> None:
    """Retire the current content to a backup and create a replacement file."""
    run_task(
        ctx,
        build_task(operation=OperationType.UPDATE, path=path, size=size),
        command="shadowvault file update",
    )


@app.command()
def delete(ctx: typer.Context, path: PathArg) -> None:
    """Retire a file to a backup. The content stays recoverable."""
    run_task(
        ctx,
        build_task(operation=OperationType.DELETE, path=path),
        command="shadowvault file delete",
    )


@app.command()
def copy(ctx: typer.Context, path: PathArg) -> None:
    """Snapshot a file into a new backup, keeping it live."""
    run_task(
        ctx,
        build_task(operation=OperationType.COPY, path=path),
        command="shadowvault file copy",
    )


@app.command()
def rename(
    ctx: typer.Context,
    path: PathArg,
    new_path: Annotated[str, typer.Argument(help="New path of the file.")],
    target: Annotated[
        TargetChoice,
        typer.Option("--target", "-t", help="Rename the live file, its backups, or both."),
    ] = TargetChoice.BOTH,
) -> None:
    """Rename a file and carry its backups along."""
    run_task(
        ctx,
        build_task(
            operation=OperationType.RENAME,
            path=path,
            new_path=new_path,
            target=target.to_target(),
        ),
        command="shadowvault file rename",
    )


@app.command()
def crush(
    ctx: typer.Context,
    path: PathArg,
    target: Annotated[
        TargetChoice,
        typer.Option("--target", "-t", help="Crush the live file, its backups, or both."),
    ] = TargetChoice.BOTH,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Overwrite and delete a file and/or its backups. This cannot be undone."""
    if not yes:
        what = {
            TargetChoice.LIVE: "the live file",
            TargetChoice.BACKUPS: "every backup of",
            TargetChoice.BOTH: "the live file and every backup of",
        }[target]
        if not typer.confirm(f"Irrecoverably crush {what} {path}?", default=False):
            raise typer.Abort()

    run_task(
        ctx,
        build_task(operation=OperationType.CRUSH, path=path, target=target.to_target()),
        command="shadowvault file crush",
    )
