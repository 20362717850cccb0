"""Directory-creating move, copy and create primitives.

Each primitive makes sure the destination's parent directory tree exists
before touching the destination.
"""

import io
import logging
import os
from collections.abc import Callable

from shadowvault.lifecycle.errors import IoFailure, RenameFailure
from shadowvault.lifecycle.models import BLOCK_SIZE
from shadowvault.lifecycle.pathing import DEFAULT_DIR_MODE, ensure_parent_directory

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o640


def _opener(mode: int) -> Callable[[str, int], int]:
    """Return an open() opener that creates files with ``mode``."""

    def opener(path: str, flags: int) -> int:
        return os.open(path, flags, mode)

    return opener


def _write_block(dst: io.RawIOBase, data: bytes, path: str) -> None:
    try:
        n = dst.write(data)
    except OSError as e:
        logger.error("write failed: filepath %s, %s", path, e.strerror)
        raise IoFailure("write", path, e) from e
    if n != len(data):
        logger.error("write failed: %d want, %s write", len(data), n)
        raise IoFailure("write", path, detail=f"short write: {n} of {len(data)} bytes")


def move_file(
    old_path: str,
    new_path: str,
    *,
    dir_mode: int = DEFAULT_DIR_MODE,
) -> str:
    """Atomically rename a file, creating the destination directory first.

    Args:
        old_path: Existing path.
        new_path: Destination path.
        dir_mode: Mode for created directories.

    Returns:
        The destination path.

    Raises:
        DirectoryCreationFailure: If the destination directory cannot be created.
        RenameFailure: If the rename fails (missing source, cross-device, ...).
    """
    ensure_parent_directory(new_path, dir_mode)
    try:
        os.rename(old_path, new_path)
    except OSError as e:
        logger.error("rename failed: oldpath %s, newpath %s, %s", old_path, new_path, e.strerror)
        raise RenameFailure(old_path, new_path, e) from e
    logger.debug("Moved %s -> %s", old_path, new_path)
    return new_path


def copy_file(
    old_path: str,
    new_path: str,
    *,
    block_size: int = BLOCK_SIZE,
    dir_mode: int = DEFAULT_DIR_MODE,
    file_mode: int = DEFAULT_FILE_MODE,
) -> int:
    """Copy a file's full byte range into a new file.

    The destination is created or truncated. A short write is fatal and
    not retried.

    Args:
        old_path: Source file.
        new_path: Destination file.
        block_size: Size of each read.
        dir_mode: Mode for created directories.
        file_mode: Mode for a newly created destination.

    Returns:
        Number of bytes copied.

    Raises:
        DirectoryCreationFailure: If the destination directory cannot be created.
        IoFailure: If any open, stat, read or write step fails.
    """
    ensure_parent_directory(new_path, dir_mode)

    try:
        src = open(old_path, "rb", buffering=0)
    except OSError as e:
        logger.error("open failed: old_path %s, %s", old_path, e.strerror)
        raise IoFailure("open", old_path, e) from e

    with src:
        try:
            dst = open(new_path, "wb", buffering=0, opener=_opener(file_mode))
        except OSError as e:
            logger.error("open failed: new_path %s, %s", new_path, e.strerror)
            raise IoFailure("open", new_path, e) from e

        with dst:
            try:
                size = os.fstat(src.fileno()).st_size
            except OSError as e:
                logger.error("fstat failed: %s, %s", old_path, e.strerror)
                raise IoFailure("fstat", old_path, e) from e

            left = size
            while left > 0:
                try:
                    chunk = src.read(min(block_size, left))
                except OSError as e:
                    logger.error("read failed: %s, %s", old_path, e.strerror)
                    raise IoFailure("read", old_path, e) from e
                if not chunk:
                    raise IoFailure("read", old_path, detail=f"unexpected EOF, {left} bytes left")
                _write_block(dst, chunk, new_path)
                left -= len(chunk)

    logger.debug("Copied %d bytes %s -> %s", size, old_path, new_path)
    return size


def create_with_size(
    path: str,
    size: int,
    *,
    block_size: int = BLOCK_SIZE,
    dir_mode: int = DEFAULT_DIR_MODE,
    file_mode: int = DEFAULT_FILE_MODE,
) -> str:
    """Create (or truncate) a file and fill it with ``size`` zero bytes.

    Used to materialize a newly uploaded file of known size.

    Args:
        path: File to create.
        size: Number of bytes to write.
        block_size: Size of each write.
        dir_mode: Mode for created directories.
        file_mode: Mode for a newly created file.

    Returns:
        The file path.

    Raises:
        ValueError: If size is negative.
        DirectoryCreationFailure: If the parent directory cannot be created.
        IoFailure: If the file cannot be opened or written.
    """
    if size < 0:
        msg = f"File size cannot be negative, got {size}"
        raise ValueError(msg)

    ensure_parent_directory(path, dir_mode)

    try:
        f = open(path, "wb", buffering=0, opener=_opener(file_mode))
    except OSError as e:
        logger.error("open failed: filepath %s, %s", path, e.strerror)
        raise IoFailure("open", path, e) from e

    zeros = bytes(block_size)
    with f:
        left = size
        while left > 0:
            blocksize = min(left, block_size)
            _write_block(f, zeros[:blocksize], path)
            left -= blocksize

    logger.debug("Created %s with %d bytes", path, size)
    return path
