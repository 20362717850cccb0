"""Utility modules for shadowvault.

This module exports commonly used utility functions.
"""

from shadowvault.utils.formatting import (
    console,
    create_backups_table,
    err_console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "create_backups_table",
    "err_console",
    "format_size",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
