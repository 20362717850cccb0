"""Error taxonomy for the lifecycle engine.

Primitives raise these typed errors, chained to the underlying OSError
where there is one. Composite operations re-raise them verbatim and
BackupLifecycleManager.execute() converts them into a failed
LifecycleResult for the protocol layer.
"""


class LifecycleError(Exception):
    """Base exception for lifecycle engine errors.

    Attributes:
        path: Path the failing step operated on.
    """

    kind = "lifecycle_error"

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class InvalidPath(LifecycleError, ValueError):
    """Raised when a path is malformed or has no usable basename."""

    kind = "invalid_path"


class IoFailure(LifecycleError):
    """Raised when an open/read/write/stat/seek/sync step fails.

    Attributes:
        step: Name of the failing system step (e.g. "open", "fdatasync").
        errno: OS error number, None for logical failures such as short writes.
        strerror: OS error description, if any.
    """

    kind = "io_failure"

    def __init__(
        self,
        step: str,
        path: str,
        error: OSError | None = None,
        detail: str | None = None,
    ) -> None:
        self.step = step
        self.errno = error.errno if error is not None else None
        self.strerror = error.strerror if error is not None else None
        reason = detail or (self.strerror or str(error) if error is not None else "failed")
        super().__init__(f"{step} failed: {path}: {reason}", path)


class DirectoryCreationFailure(LifecycleError):
    """Raised when a directory (or one of its ancestors) cannot be created."""

    kind = "directory_creation_failure"

    def __init__(self, path: str, error: OSError | None = None, detail: str | None = None) -> None:
        self.errno = error.errno if error is not None else None
        reason = detail or (error.strerror if error is not None else "failed")
        super().__init__(f"Cannot create directory {path}: {reason}", path)


class RenameFailure(LifecycleError):
    """Raised when an atomic rename fails.

    Attributes:
        source: Path being renamed.
        destination: Target path of the rename.
        errno: OS error number.
    """

    kind = "rename_failure"

    def __init__(self, source: str, destination: str, error: OSError) -> None:
        self.source = source
        self.destination = destination
        self.errno = error.errno
        super().__init__(
            f"rename failed: {source} -> {destination}: {error.strerror or error}",
            source,
        )


class PartialBackupSweepFailure(LifecycleError):
    """Raised when a sweep fails after some backups were already processed.

    Nothing is rolled back: the completed backups stay in their new state.

    Attributes:
        completed: Backup paths processed before the failure (in their
            resulting location for renames, original location for crushes).
        failed_path: Backup path whose processing failed.
        cause: The error that stopped the sweep.
    """

    kind = "partial_backup_sweep_failure"

    def __init__(
        self,
        operation: str,
        completed: list[str],
        failed_path: str | None,
        cause: Exception,
    ) -> None:
        self.operation = operation
        self.completed = tuple(completed)
        self.failed_path = failed_path
        self.cause = cause
        super().__init__(
            f"{operation} sweep stopped after {len(completed)} backup(s) at {failed_path}: {cause}",
            failed_path,
        )
