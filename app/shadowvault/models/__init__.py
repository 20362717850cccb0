"""Data models for shadowvault.

This module exports the audit journal data structures.
"""

from shadowvault.models.history import (
    HistoryActionType,
    HistoryEntry,
    HistoryItem,
    PathRole,
    create_history_entry,
)

__all__ = [
    "HistoryActionType",
    "HistoryEntry",
    "HistoryItem",
    "PathRole",
    "create_history_entry",
]
