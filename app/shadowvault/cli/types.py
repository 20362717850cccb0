"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from shadowvault.cli.display import print_result
from shadowvault.lifecycle.config import EngineConfigError, load_engine_config_or_default
from shadowvault.lifecycle.history import record_lifecycle_result
from shadowvault.lifecycle.manager import BackupLifecycleManager
from shadowvault.lifecycle.models import LifecycleResult, OperationTarget, TaskDescriptor
from shadowvault.utils.formatting import print_error, print_warning


class TargetChoice(str, Enum):
    """What a rename or crush applies to."""

    LIVE = "live"
    BACKUPS = "backups"
    BOTH = "both"

    def to_target(self) -> OperationTarget:
        """Convert to the engine's target mask."""
        return OperationTarget[self.name]


def _ctx_option(ctx: typer.Context, key: str) -> object:
    """Read a global option stored by the main callback."""
    if isinstance(ctx.obj, dict):
        return ctx.obj.get(key)
    return None


def get_manager(ctx: typer.Context) -> BackupLifecycleManager:
    """Build a lifecycle manager from the engine configuration.

    Args:
        ctx: Typer context carrying the global ``--config`` option.

    Returns:
        Manager configured from the engine config file or defaults.

    Raises:
        typer.Exit: If the engine config exists but is invalid.
    """
    config_path = _ctx_option(ctx, "config_path")
    try:
        config = load_engine_config_or_default(
            config_path if isinstance(config_path, Path) else None
        )
    except EngineConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    return BackupLifecycleManager(config)


def build_task(**fields: Any) -> TaskDescriptor:
    """Build a task descriptor from command arguments.

    Raises:
        typer.Exit: With code 1 if the arguments do not form a valid task.
    """
    try:
        return TaskDescriptor(**fields)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'task'}: {err['msg']}"
            for err in e.errors()
        )
        print_error(f"Invalid arguments: {problems}")
        raise typer.Exit(code=1) from e


def run_task(ctx: typer.Context, task: TaskDescriptor, command: str) -> LifecycleResult:
    """Execute a task, record it in history and report the outcome.

    Args:
        ctx: Typer context.
        task: Task to execute.
        command: Command line recorded in the history entry.

    Returns:
        The successful result.

    Raises:
        typer.Exit: With code 1 if the task failed.
    """
    manager = get_manager(ctx)
    result = manager.execute(task)

    try:
        record_lifecycle_result(task, result, command=command)
    except (OSError, RuntimeError) as e:
        print_warning(f"Failed to record history: {e}")

    print_result(result, quiet=bool(_ctx_option(ctx, "quiet")))

    if result.failed:
        raise typer.Exit(code=1)
    return result
