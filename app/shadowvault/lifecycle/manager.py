"""Backup lifecycle orchestration.

Composes path resolution, backup naming, file operations, secure crush
and tree walks into the lifecycle operations of a managed file:

- update: retire the live file to a backup, then materialize a new one
- delete: retire the live file to a backup
- copy: snapshot the live file into a backup, keeping it live
- crush: securely destroy the live file and/or its backup set
- rename: rename the live file and/or carry its backup set along
- dir delete / dir rename: retire or rename a directory as a whole

Nothing here is transactional. Each operation stops at the first failing
step and raises that step's error; steps already committed are not
rolled back. A sweep that fails after processing some backups raises
PartialBackupSweepFailure so callers can tell that case apart.
"""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from shadowvault.lifecycle.config import EngineConfig, get_default_config
from shadowvault.lifecycle.crush import crush_path
from shadowvault.lifecycle.errors import LifecycleError, PartialBackupSweepFailure, RenameFailure
from shadowvault.lifecycle.fileops import copy_file, create_with_size, move_file
from shadowvault.lifecycle.models import (
    LifecycleResult,
    ManagedPath,
    OperationTarget,
    OperationType,
    TaskDescriptor,
)
from shadowvault.lifecycle.naming import (
    derive_renamed_backup_path,
    is_backup_of,
    make_backup_name,
)
from shadowvault.lifecycle.pathing import ensure_directory_tree, split_path
from shadowvault.lifecycle.walker import iter_backups, walk_tree

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Sweep:
    """Walk state for a backup sweep.

    Attributes:
        origin: Basename whose backups are processed.
        handler: Called with each backup path, returns its resulting path.
        completed: Resulting paths of the backups processed so far.
        current: Backup being processed when the walk stopped.
    """

    origin: str
    handler: Callable[[str], str]
    completed: list[str] = field(default_factory=list)
    current: str | None = None


def _sweep_action(path: str, st: os.stat_result, sweep: _Sweep) -> bool:
    sweep.current = path
    sweep.completed.append(sweep.handler(path))
    sweep.current = None
    return True


def _rename(old_path: str, new_path: str) -> None:
    try:
        os.rename(old_path, new_path)
    except OSError as e:
        logger.error("rename failed: oldpath %s, newpath %s, %s", old_path, new_path, e.strerror)
        raise RenameFailure(old_path, new_path, e) from e


class BackupLifecycleManager:
    """Runs lifecycle operations against the filesystem.

    Single-threaded and blocking: callers must serialize operations on
    the same path and run long crushes off their I/O thread.

    Attributes:
        _config: Engine configuration.
        _clock: Source of server wall-clock time for backup names.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the BackupLifecycleManager.

        Args:
            config: Engine configuration. If None, uses defaults.
            clock: Returns the current server time (local time). Client
                supplied times are never used for backup names.
        """
        self._config = config if config is not None else get_default_config()
        self._clock = clock

    @property
    def config(self) -> EngineConfig:
        """Engine configuration in use."""
        return self._config

    # =========================================================================
    # File operations
    # =========================================================================

    def upload(self, path: str, size: int) -> str:
        """Materialize a new file of ``size`` zero bytes at ``path``.

        Returns:
            The canonical path of the file.
        """
        managed = split_path(path)
        return create_with_size(
            managed.path,
            size,
            block_size=self._config.block_size,
            dir_mode=self._config.dir_mode,
            file_mode=self._config.file_mode,
        )

    def file_backup_update(self, path: str, size: int = 0) -> str:
        """Retire the live file and put a new file in its place.

        The current content moves to a fresh backup name, then a file of
        ``size`` zero bytes is created at the canonical path for the
        incoming content.

        Args:
            path: Live file.
            size: Size of the replacement file.

        Returns:
            Path of the backup holding the previous content.

        Raises:
            InvalidPath: If the path is malformed.
            DirectoryCreationFailure: If the BackupDirectory cannot be created.
            RenameFailure: If the file cannot be retired (object unchanged).
            IoFailure: If the replacement cannot be created (previous
                content is already retired).
        """
        managed = split_path(path)
        backup_path = self._retire(managed)
        self.upload(managed.path, size)
        logger.info("Updated %s, previous content in %s", managed.path, backup_path)
        return backup_path

    def file_backup_delete(self, path: str) -> str:
        """Retire the live file; nothing replaces it.

        Returns:
            Path of the backup holding the deleted content.

        Raises:
            InvalidPath: If the path is malformed.
            DirectoryCreationFailure: If the BackupDirectory cannot be created.
            RenameFailure: If the file cannot be moved (e.g. already gone).
        """
        managed = split_path(path)
        backup_path = self._retire(managed)
        logger.info("Deleted %s, content retired to %s", managed.path, backup_path)
        return backup_path

    def file_backup_copy(self, path: str) -> str:
        """Snapshot the live file into a backup by content copy.

        Returns:
            Path of the new backup.

        Raises:
            InvalidPath: If the path is malformed.
            DirectoryCreationFailure: If the BackupDirectory cannot be created.
            IoFailure: If the copy fails.
        """
        managed = split_path(path)
        backup_path = self._backup_name(managed.path)
        copy_file(
            managed.path,
            backup_path,
            block_size=self._config.block_size,
            dir_mode=self._config.dir_mode,
            file_mode=self._config.file_mode,
        )
        logger.info("Copied %s to backup %s", managed.path, backup_path)
        return backup_path

    def file_backup_crush(
        self,
        path: str,
        target: OperationTarget = OperationTarget.BOTH,
    ) -> list[str]:
        """Securely destroy a file and/or every backup of it.

        The live file is crushed first; if that fails nothing else is
        attempted. The backup sweep stops at the first backup it cannot
        crush and does not restore anything.

        Args:
            path: Live file path (it need not exist when only backups are targeted).
            target: LIVE, BACKUPS or BOTH.

        Returns:
            Paths of the crushed backups.

        Raises:
            ValueError: If the target mask is invalid.
            InvalidPath: If the path is malformed.
            IoFailure: If the live crush or the first backup crush fails.
            PartialBackupSweepFailure: If the sweep fails after crushing
                at least one backup.
        """
        target = OperationTarget.parse(target)
        managed = split_path(path)

        if target & OperationTarget.LIVE:
            self._crush(managed.path)

        if not target & OperationTarget.BACKUPS:
            return []

        crushed = self._sweep("crush", managed, self._crush_backup)
        logger.info("Crushed %d backup(s) of %s", len(crushed), managed.path)
        return crushed

    def file_backup_rename(
        self,
        old_path: str,
        new_path: str,
        target: OperationTarget = OperationTarget.BOTH,
    ) -> list[str]:
        """Rename a file and/or carry its backup set to the new name.

        Each backup keeps its timestamp suffix and moves to the
        BackupDirectory of the new path's directory under the new
        basename. A sweep that fails part way leaves some backups renamed.

        Args:
            old_path: Current path.
            new_path: New path (its directory is created if missing).
            target: LIVE, BACKUPS or BOTH.

        Returns:
            New paths of the renamed backups.

        Raises:
            ValueError: If the target mask is invalid.
            InvalidPath: If a path is malformed.
            DirectoryCreationFailure: If a destination directory cannot be created.
            RenameFailure: If the live rename or the first backup rename fails.
            PartialBackupSweepFailure: If the sweep fails after renaming
                at least one backup.
        """
        target = OperationTarget.parse(target)
        old = split_path(old_path)
        new = split_path(new_path)
        dir_mode = self._config.dir_mode
        backup_dir_name = self._config.backup_dir_name

        ensure_directory_tree(new.directory, dir_mode)
        if target & OperationTarget.BACKUPS:
            ensure_directory_tree(new.backup_dir(backup_dir_name), dir_mode)

        if target & OperationTarget.LIVE:
            _rename(old.path, new.path)
            logger.info("Renamed %s -> %s", old.path, new.path)

        if not target & OperationTarget.BACKUPS:
            return []

        def rename_backup(backup_path: str) -> str:
            renamed = derive_renamed_backup_path(
                old.path, new.path, backup_path, backup_dir_name=backup_dir_name
            )
            _rename(backup_path, renamed)
            return renamed

        renamed = self._sweep("rename", old, rename_backup)
        logger.info("Renamed %d backup(s) of %s to %s", len(renamed), old.path, new.path)
        return renamed

    def list_backups(self, path: str) -> list[str]:
        """List the backups of a file, oldest name first.

        Returns:
            Sorted backup paths (empty if there is no BackupDirectory).

        Raises:
            InvalidPath: If the path is malformed.
            IoFailure: If the BackupDirectory cannot be read.
        """
        managed = split_path(path)
        return sorted(
            backup
            for backup, _ in iter_backups(
                managed.directory,
                managed.basename,
                backup_dir_name=self._config.backup_dir_name,
            )
        )

    # =========================================================================
    # Directory operations
    # =========================================================================

    def dir_backup_delete(self, path: str) -> str:
        """Retire a whole directory to a backup name in its parent.

        The files inside keep their names; their own backup sets move
        along with the directory.

        Returns:
            Path of the retired directory.

        Raises:
            InvalidPath: If the path is malformed.
            DirectoryCreationFailure: If the BackupDirectory cannot be created.
            RenameFailure: If the directory cannot be moved.
        """
        managed = split_path(path)
        ensure_directory_tree(
            managed.backup_dir(self._config.backup_dir_name),
            self._config.dir_mode,
        )
        backup_path = self._backup_name(managed.path)
        _rename(managed.path, backup_path)
        logger.info("Deleted directory %s, retired to %s", managed.path, backup_path)
        return backup_path

    def dir_backup_rename(self, old_path: str, new_path: str) -> str:
        """Rename a directory in place.

        Backups stored in the parent's BackupDirectory under the old
        directory name are not rewritten.

        Returns:
            The new directory path.

        Raises:
            InvalidPath: If a path is malformed.
            RenameFailure: If the rename fails.
        """
        old = split_path(old_path)
        new = split_path(new_path)
        _rename(old.path, new.path)
        logger.info("Renamed directory %s -> %s", old.path, new.path)
        return new.path

    # =========================================================================
    # Task dispatch
    # =========================================================================

    def execute(self, task: TaskDescriptor) -> LifecycleResult:
        """Run a task and report its outcome instead of raising.

        Args:
            task: Decoded request from the protocol layer.

        Returns:
            LifecycleResult describing success or the first failure. The
            filesystem is left in whatever state the failing step reached.
        """
        logger.debug(
            "Executing %s: path %s, new_path %s, size %d, target %s, key %s",
            task.operation.value,
            task.path,
            task.new_path,
            task.size,
            task.target.name,
            task.key,
        )

        try:
            backup_path, swept = self._dispatch(task)
        except PartialBackupSweepFailure as e:
            logger.error("%s failed: path %s, %s", task.operation.value, task.path, e)
            return LifecycleResult(
                operation=task.operation,
                path=task.path,
                success=False,
                error=str(e),
                error_kind=e.kind,
                swept=e.completed,
            )
        except LifecycleError as e:
            logger.error("%s failed: path %s, %s", task.operation.value, task.path, e)
            return LifecycleResult(
                operation=task.operation,
                path=task.path,
                success=False,
                error=str(e),
                error_kind=e.kind,
            )
        except (OSError, ValueError) as e:
            logger.error("%s failed: path %s, %s", task.operation.value, task.path, e)
            return LifecycleResult(
                operation=task.operation,
                path=task.path,
                success=False,
                error=str(e),
                error_kind="os_error" if isinstance(e, OSError) else "invalid_request",
            )

        return LifecycleResult(
            operation=task.operation,
            path=task.path,
            success=True,
            backup_path=backup_path,
            swept=tuple(swept),
        )

    def _dispatch(self, task: TaskDescriptor) -> tuple[str | None, list[str]]:
        """Route a task to its operation.

        Returns:
            Tuple of (backup path or None, swept backup paths).
        """
        op = task.operation
        new_path = task.new_path or ""

        if op == OperationType.UPLOAD:
            self.upload(task.path, task.size)
            return None, []
        if op == OperationType.UPDATE:
            return self.file_backup_update(task.path, task.size), []
        if op == OperationType.DELETE:
            return self.file_backup_delete(task.path), []
        if op == OperationType.COPY:
            return self.file_backup_copy(task.path), []
        if op == OperationType.CRUSH:
            return None, self.file_backup_crush(task.path, task.target)
        if op == OperationType.RENAME:
            return None, self.file_backup_rename(task.path, new_path, task.target)
        if op == OperationType.DIR_DELETE:
            return self.dir_backup_delete(task.path), []
        if op == OperationType.DIR_RENAME:
            self.dir_backup_rename(task.path, new_path)
            return None, []

        msg = f"Unsupported operation: {op}"
        raise ValueError(msg)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _backup_name(self, path: str) -> str:
        return make_backup_name(
            path,
            self._clock(),
            backup_dir_name=self._config.backup_dir_name,
            style=self._config.backup_name_style,
        )

    def _retire(self, managed: ManagedPath) -> str:
        backup_path = self._backup_name(managed.path)
        return move_file(managed.path, backup_path, dir_mode=self._config.dir_mode)

    def _crush(self, path: str) -> None:
        crush_path(
            path,
            self._config.crush_passes,
            fill=self._config.crush_fill,
            block_size=self._config.block_size,
        )

    def _crush_backup(self, backup_path: str) -> str:
        self._crush(backup_path)
        return backup_path

    def _sweep(
        self,
        operation: str,
        managed: ManagedPath,
        handler: Callable[[str], str],
    ) -> list[str]:
        """Apply ``handler`` to every backup of ``managed``.

        Raises:
            PartialBackupSweepFailure: If a backup fails after others succeeded.
            LifecycleError: The first error, if nothing was processed yet.
        """
        backup_dir_name = self._config.backup_dir_name
        backup_dir = managed.backup_dir(backup_dir_name)
        if not os.path.isdir(backup_dir):
            logger.debug("No backup directory for %s, nothing to %s", managed.path, operation)
            return []

        sweep = _Sweep(origin=managed.basename, handler=handler)
        try:
            walk_tree(
                backup_dir,
                _sweep_action,
                sweep,
                backup_dir_name=backup_dir_name,
                recursive=False,
                match=lambda name: is_backup_of(name, sweep.origin),
            )
        except (LifecycleError, OSError) as e:
            if not sweep.completed:
                raise
            raise PartialBackupSweepFailure(operation, sweep.completed, sweep.current, e) from e
        return sweep.completed
