"""File lifecycle engine.

This module provides path resolution, backup naming, tree walking,
secure crush, directory-creating file operations and the lifecycle
manager that composes them.
"""

from shadowvault.lifecycle.config import EngineConfig, load_engine_config_or_default
from shadowvault.lifecycle.crush import CrushFill, crush_fd, crush_path
from shadowvault.lifecycle.errors import (
    DirectoryCreationFailure,
    InvalidPath,
    IoFailure,
    LifecycleError,
    PartialBackupSweepFailure,
    RenameFailure,
)
from shadowvault.lifecycle.fileops import copy_file, create_with_size, move_file
from shadowvault.lifecycle.manager import BackupLifecycleManager
from shadowvault.lifecycle.models import (
    BACKUP_DIR_NAME,
    LifecycleResult,
    ManagedPath,
    OperationTarget,
    OperationType,
    TaskDescriptor,
)
from shadowvault.lifecycle.naming import (
    BackupNameStyle,
    derive_renamed_backup_path,
    is_backup_of,
    make_backup_name,
)
from shadowvault.lifecycle.pathing import ensure_directory_tree, split_path
from shadowvault.lifecycle.walker import iter_backups, iter_tree, walk_tree

__all__ = [
    "BACKUP_DIR_NAME",
    "BackupLifecycleManager",
    "BackupNameStyle",
    "CrushFill",
    "DirectoryCreationFailure",
    "EngineConfig",
    "InvalidPath",
    "IoFailure",
    "LifecycleError",
    "LifecycleResult",
    "ManagedPath",
    "OperationTarget",
    "OperationType",
    "PartialBackupSweepFailure",
    "RenameFailure",
    "TaskDescriptor",
    "copy_file",
    "create_with_size",
    "crush_fd",
    "crush_path",
    "derive_renamed_backup_path",
    "ensure_directory_tree",
    "is_backup_of",
    "iter_backups",
    "iter_tree",
    "load_engine_config_or_default",
    "make_backup_name",
    "move_file",
    "split_path",
    "walk_tree",
]
