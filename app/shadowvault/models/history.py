"""History entry model for the lifecycle audit journal.

This module defines data structures for recording lifecycle operations
(retirements, renames and crushes) in a history file, so every
destruction of data leaves a trace.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class HistoryActionType(str, Enum):
    """Type of action recorded in history.

    Values mirror the lifecycle operation codes.
    """

    UPLOAD = "upload"
    UPDATE = "update"
    DELETE = "delete"
    COPY = "copy"
    RENAME = "rename"
    CRUSH = "crush"
    DIR_DELETE = "dir_delete"
    DIR_RENAME = "dir_rename"


class PathRole(str, Enum):
    """Role a path played in a recorded action.

    Attributes:
        ORIGIN: The live path the operation was requested on.
        DESTINATION: The new live path of a rename.
        BACKUP: A backup created, renamed or crushed by the operation.
    """

    ORIGIN = "origin"
    DESTINATION = "destination"
    BACKUP = "backup"


@dataclass(frozen=True, slots=True)
class HistoryItem:
    """Single path affected by an action.

    Attributes:
        path: Absolute or caller-supplied path.
        role: Role of the path in the action.
    """

    path: str
    role: PathRole = PathRole.ORIGIN

    def __post_init__(self) -> None:
        """Validate item data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Returns:
            Dictionary representation of the history item.
        """
        return {"path": self.path, "role": self.role.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryItem":
        """Deserialize from dictionary.

        Args:
            data: Dictionary containing item data.

        Returns:
            HistoryItem instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If role is invalid.
        """
        return cls(
            path=data["path"],
            role=PathRole(data.get("role", PathRole.ORIGIN.value)),
        )


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Record of a single lifecycle action.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        timestamp: When the action occurred (ISO 8601 format with timezone).
        action_type: Type of action (update, crush, etc.).
        items: Tuple of paths affected by this action.
        success: Whether the action completed successfully.
        metadata: Additional context (command, error, target, etc.).
    """

    id: str
    timestamp: str
    action_type: HistoryActionType
    items: tuple[HistoryItem, ...]
    success: bool = True
    metadata: dict[str, Any] = field(default_factory=lambda: {})

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.id:
            msg = "History entry ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)
        if not self.items:
            msg = "History entry must have at least one item"
            raise ValueError(msg)

    def paths(self, role: PathRole) -> list[str]:
        """Return the paths recorded with a given role."""
        return [item.path for item in self.items if item.role == role]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Returns:
            Dictionary representation of the history entry.
        """
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "action_type": self.action_type.value,
            "items": [item.to_dict() for item in self.items],
            "success": self.success,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        """Deserialize from dictionary.

        Args:
            data: Dictionary containing entry data.

        Returns:
            HistoryEntry instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If action_type or item data is invalid.
        """
        items = tuple(HistoryItem.from_dict(item) for item in data["items"])
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            action_type=HistoryActionType(data["action_type"]),
            items=items,
            success=data.get("success", True),
            metadata=data.get("metadata", {}),
        )

    def to_json_line(self) -> str:
        """Serialize to JSON line for JSONL storage.

        Returns:
            Single JSON line (no trailing newline).
        """
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> "HistoryEntry":
        """Deserialize from JSON line.

        Args:
            line: Single JSON line (with or without trailing whitespace).

        Returns:
            HistoryEntry instance.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        data = json.loads(line.strip())
        return cls.from_dict(data)


def create_history_entry(
    action_type: HistoryActionType,
    items: list[HistoryItem],
    success: bool = True,
    metadata: dict[str, Any] | None = None,
) -> HistoryEntry:
    """Factory function to create a new HistoryEntry.

    Automatically generates a unique ID and current timestamp.

    Args:
        action_type: Type of action being recorded.
        items: List of paths affected by this action.
        success: Whether the action succeeded.
        metadata: Optional additional context.

    Returns:
        New HistoryEntry with auto-generated ID and timestamp.

    Raises:
        ValueError: If items list is empty.
    """
    if not items:
        msg = "Cannot create history entry with no items"
        raise ValueError(msg)

    return HistoryEntry(
        id=uuid.uuid4().hex[:12],
        timestamp=datetime.now(UTC).isoformat(),
        action_type=action_type,
        items=tuple(items),
        success=success,
        metadata=metadata or {},
    )
