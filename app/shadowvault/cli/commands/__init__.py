"""CLI commands for shadowvault.

This package contains all subcommand implementations.
"""

from shadowvault.cli.commands import backups, config, directory, file, history

__all__ = ["backups", "config", "directory", "file", "history"]
