"""Path resolution and directory auto-creation.

Splits paths into ManagedPath values, resolving relative paths against
the current working directory, and creates directory trees the way
mkdir -p does while keeping an explicit mode on every level.
"""

import logging
import os

from shadowvault.lifecycle.errors import DirectoryCreationFailure, InvalidPath
from shadowvault.lifecycle.models import MAX_PATH_LEN, ManagedPath

logger = logging.getLogger(__name__)

DEFAULT_DIR_MODE = 0o755


def check_path(path: str) -> str:
    """Validate a composed path and return it unchanged.

    Args:
        path: Path to validate.

    Returns:
        The same path.

    Raises:
        InvalidPath: If the path is empty, contains NUL, or is too long.
    """
    if not path:
        raise InvalidPath("Path cannot be empty")
    if "\x00" in path:
        raise InvalidPath(f"Path contains a NUL byte: {path!r}", path)
    if len(os.fsencode(path)) >= MAX_PATH_LEN:
        raise InvalidPath(f"Path exceeds {MAX_PATH_LEN - 1} bytes: {path[:64]}...", path)
    return path


def join_path(*parts: str) -> str:
    """Join path components, failing closed instead of truncating.

    Raises:
        InvalidPath: If the joined path is too long.
    """
    return check_path(os.path.join(*parts))


def absolute_path(path: str) -> str:
    """Resolve a relative path against the current working directory.

    Absolute paths are returned unchanged (no normalization), so
    "." and ".." components stay visible to split_path().
    """
    check_path(path)
    if os.path.isabs(path):
        return path
    return join_path(os.getcwd(), path)


def split_path(path: str) -> ManagedPath:
    """Split a path into its directory and basename.

    Relative paths are joined to the current working directory first.
    Trailing separators are ignored, as basename(3) does.

    Args:
        path: Absolute or relative path.

    Returns:
        ManagedPath with an absolute directory.

    Raises:
        InvalidPath: If the path is malformed or has no usable basename.
    """
    full = absolute_path(path)
    stripped = full.rstrip(os.sep) or os.sep
    if stripped == os.sep:
        raise InvalidPath(f"Path has no filename: {path!r}", path)
    directory, basename = os.path.split(stripped)
    return ManagedPath(directory=directory or os.sep, basename=basename)


def ensure_directory_tree(path: str, mode: int = DEFAULT_DIR_MODE) -> str:
    """Create a directory and every missing ancestor, root to leaf.

    A level that already exists as a directory counts as success, so
    calling this on an existing tree is a no-op.

    Args:
        path: Directory to create (absolute or relative to the cwd).
        mode: Mode for each created level (subject to the umask).

    Returns:
        The absolute directory path.

    Raises:
        InvalidPath: If the path is malformed.
        DirectoryCreationFailure: If any level cannot be created.
    """
    full = os.path.normpath(absolute_path(path))

    current = os.sep
    for part in full.split(os.sep):
        if not part:
            continue
        current = os.path.join(current, part)
        try:
            os.mkdir(current, mode)
            logger.debug("Created directory %s", current)
        except FileExistsError as e:
            if not os.path.isdir(current):
                raise DirectoryCreationFailure(current, e, "exists and is not a directory") from e
        except OSError as e:
            logger.error("mkdir failed: path %s, %s", current, e.strerror)
            raise DirectoryCreationFailure(current, e) from e

    return full


def ensure_parent_directory(path: str, mode: int = DEFAULT_DIR_MODE) -> str:
    """Create the parent directory tree of a file path.

    Returns:
        The absolute parent directory path.
    """
    parent = os.path.dirname(absolute_path(path))
    return ensure_directory_tree(parent or os.sep, mode)
