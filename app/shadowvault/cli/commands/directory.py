"""Directory lifecycle commands.

Provides the `shadowvault dir` subcommands for retiring and renaming
whole directories.
"""

from typing import Annotated

import typer

from shadowvault.cli.types import build_task, run_task
from shadowvault.lifecycle.models import OperationType

app = typer.Typer(
    help="Retire and rename directories.",
    no_args_is_help=True,
)


@app.command()
def delete(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Directory to retire.")],
) -> None:
    """Retire a directory, with everything in it, to a backup name."""
    run_task(
        ctx,
        build_task(operation=OperationType.DIR_DELETE, path=path),
        command="shadowvault dir delete",
    )


@app.command()
def rename(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Directory to rename.")],
    new_path: Annotated[str, typer.Argument(help="New directory path.")],
) -> None:
    """Rename a directory. Backups of the directory itself are not renamed."""
    run_task(
        ctx,
        build_task(operation=OperationType.DIR_RENAME, path=path, new_path=new_path),
        command="shadowvault dir rename",
    )
