"""Lifecycle domain models.

This module defines the engine-wide constants, the normalized path value,
the target mask shared by rename and crush, and the task descriptor and
result types exchanged with the protocol layer.
"""

import os
from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shadowvault.lifecycle.errors import InvalidPath

# Reserved hidden directory holding the backups of its parent directory.
# Existing backup sets on disk depend on this exact name.
BACKUP_DIR_NAME = ".#__hide.youcantseeme__#"

# Longest path the engine composes (PATH_MAX on Linux)
MAX_PATH_LEN = 4096

# Longest single path component (NAME_MAX on Linux)
NAME_MAX = 255

# Block size used for copy, fill and crush I/O
BLOCK_SIZE = 8192

DEFAULT_CRUSH_PASSES = 3

_RESERVED_BASENAMES = frozenset({"", ".", "..", os.sep})


@dataclass(frozen=True, slots=True)
class ManagedPath:
    """A filesystem path normalized into directory and basename.

    Attributes:
        directory: Absolute directory containing the entry.
        basename: Final path component; never ".", "..", the separator or empty.
    """

    directory: str
    basename: str

    def __post_init__(self) -> None:
        """Validate the basename invariant."""
        if self.basename in _RESERVED_BASENAMES:
            msg = f"Path has no filename: {os.path.join(self.directory, self.basename)!r}"
            raise InvalidPath(msg, self.directory)
        if os.sep in self.basename:
            msg = f"Basename must not contain a separator: {self.basename!r}"
            raise InvalidPath(msg, self.directory)

    @property
    def path(self) -> str:
        """Full path of the entry."""
        return os.path.join(self.directory, self.basename)

    def backup_dir(self, backup_dir_name: str = BACKUP_DIR_NAME) -> str:
        """Path of the BackupDirectory that holds this entry's backups."""
        return os.path.join(self.directory, backup_dir_name)


class OperationTarget(IntFlag):
    """Which objects a rename or crush applies to.

    Attributes:
        LIVE: The live object at its canonical path.
        BACKUPS: Every backup of the object in its BackupDirectory.
        BOTH: LIVE and BACKUPS.
    """

    LIVE = 0x0001
    BACKUPS = 0x0010
    BOTH = LIVE | BACKUPS

    @classmethod
    def parse(cls, value: Any) -> "OperationTarget":
        """Build a target from a member, an int mask, or a name.

        Raises:
            ValueError: If the mask is zero or contains undefined bits.
        """
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                msg = f"Unknown operation target: {value!r}"
                raise ValueError(msg) from None
        mask = int(value)
        if mask == 0 or mask & ~int(cls.BOTH):
            msg = f"Invalid operation target mask: {mask:#06x}"
            raise ValueError(msg)
        return cls(mask)


class OperationType(str, Enum):
    """Operation codes accepted from the protocol layer.

    Attributes:
        UPLOAD: Materialize a new file of the declared size.
        UPDATE: Retire the live file and replace it with a new one.
        DELETE: Retire the live file.
        COPY: Snapshot the live file into a backup, keeping it live.
        RENAME: Rename a file and/or its backup set.
        CRUSH: Securely destroy a file and/or its backup set.
        DIR_DELETE: Retire a whole directory.
        DIR_RENAME: Rename a directory in place.
    """

    UPLOAD = "upload"
    UPDATE = "update"
    DELETE = "delete"
    COPY = "copy"
    RENAME = "rename"
    CRUSH = "crush"
    DIR_DELETE = "dir_delete"
    DIR_RENAME = "dir_rename"


_NEEDS_NEW_PATH = frozenset({OperationType.RENAME, OperationType.DIR_RENAME})


class TaskDescriptor(BaseModel):
    """A decoded request handed to the engine by the protocol layer.

    Paths and size are untrusted: they are only validated insofar as the
    filesystem calls reject them. The client timestamp is carried for
    logging only; backup names always use the server clock.

    Attributes:
        operation: Requested operation.
        path: Origin path.
        new_path: Destination path for renames.
        size: Declared size in bytes for uploads and updates.
        target: Live/backups mask for rename and crush.
        region_id: Routing region identifier.
        site_id: Routing site identifier.
        app_id: Routing application identifier.
        gateway_id: Source gateway identifier.
        proxy_id: Destination proxy identifier.
        gateway_endpoint: Source network endpoint ("host:port").
        proxy_endpoint: Destination network endpoint ("host:port").
        client_timestamp: Client-supplied epoch seconds (never used for naming).
        file_md5: Declared content digest.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    operation: OperationType
    path: Annotated[str, Field(min_length=1, description="Origin path")]
    new_path: Annotated[str | None, Field(description="Destination path")] = None
    size: Annotated[int, Field(ge=0, description="Declared size in bytes")] = 0
    target: Annotated[OperationTarget, Field(description="Live/backups mask")] = (
        OperationTarget.BOTH
    )
    region_id: int = 0
    site_id: int = 0
    app_id: int = 0
    gateway_id: int = 0
    proxy_id: int = 0
    gateway_endpoint: str | None = None
    proxy_endpoint: str | None = None
    client_timestamp: int | None = None
    file_md5: str | None = None

    @field_validator("target", mode="before")
    @classmethod
    def validate_target(cls, v: object) -> OperationTarget:
        """Accept masks as ints or names and reject the zero mask."""
        return OperationTarget.parse(v)

    @model_validator(mode="after")
    def validate_new_path(self) -> "TaskDescriptor":
        """Validate that renames carry a destination path."""
        if self.operation in _NEEDS_NEW_PATH and not self.new_path:
            msg = f"Operation {self.operation.value} requires new_path"
            raise ValueError(msg)
        return self

    @property
    def key(self) -> tuple[int, int, int, str]:
        """Serialization key: callers run one task per key at a time."""
        return (self.region_id, self.site_id, self.app_id, self.path)


@dataclass(frozen=True, slots=True)
class LifecycleResult:
    """Outcome of a single task as reported back to the protocol layer.

    Attributes:
        operation: Operation that was executed.
        path: Origin path of the task.
        success: Whether the operation completed successfully.
        error: Error message if the operation failed, None otherwise.
        error_kind: Machine-readable error class (e.g. "rename_failure").
        backup_path: Backup created by update/delete/copy/dir_delete.
        swept: Backups renamed or crushed by a sweep (completed ones only
            when the sweep failed part way).
    """

    operation: OperationType
    path: str
    success: bool
    error: str | None = None
    error_kind: str | None = None
    backup_path: str | None = None
    swept: tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        """Check if the operation failed."""
        return not self.success
