"""CLI package for shadowvault.

This package contains the Typer application and all subcommands.
"""

from shadowvault.cli.main import app

__all__ = ["app"]
