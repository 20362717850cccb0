"""Engine configuration commands.

Provides commands to show the effective engine configuration and to
write a default configuration file.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from shadowvault.core.paths import get_engine_config_path
from shadowvault.lifecycle.config import (
    EngineConfig,
    EngineConfigError,
    get_default_config,
    load_engine_config_or_default,
    save_engine_config,
)
from shadowvault.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show and initialize the engine configuration.",
    no_args_is_help=True,
)


def _config_path(ctx: typer.Context) -> Path:
    if isinstance(ctx.obj, dict) and isinstance(ctx.obj.get("config_path"), Path):
        return ctx.obj["config_path"]
    return get_engine_config_path()


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the effective engine configuration."""
    path = _config_path(ctx)
    try:
        config = load_engine_config_or_default(path)
    except EngineConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    source = str(path) if path.exists() else "built-in defaults"
    console.print(_config_table(config, source))


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write the default engine configuration to the config file."""
    path = _config_path(ctx)
    if path.exists() and not force:
        print_info(f"Config already exists: {path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_engine_config(get_default_config(), path)
    except EngineConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Wrote engine config: {saved}")


def _config_table(config: EngineConfig, source: str) -> Table:
    """Build a table of configuration values.

    Args:
        config: Configuration to display.
        source: Where the values came from.

    Returns:
        Rich Table with one row per setting.
    """
    table = Table(
        title="Engine Configuration",
        caption=f"Source: {source}",
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Setting", style="info", no_wrap=True)
    table.add_column("Value", style="text")

    table.add_row("backup_dir_name", config.backup_dir_name)
    table.add_row("crush_passes", str(config.crush_passes))
    table.add_row("crush_fill", config.crush_fill.value)
    table.add_row("backup_name_style", config.backup_name_style.value)
    table.add_row("block_size", str(config.block_size))
    table.add_row("dir_mode", f"{config.dir_mode:04o}")
    table.add_row("file_mode", f"{config.file_mode:04o}")
    return table
