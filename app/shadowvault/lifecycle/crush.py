"""Secure multi-pass overwrite and deletion ("crush").

Each pass rewinds the file, overwrites its whole current length in
fixed-size blocks and flushes the data to stable storage. Encrypting
the content first would only be another way of overwriting it, so the
engine writes the fill directly.

Fill modes:

- random: every block is fresh ``os.urandom`` output, so the written
  content is unpredictable. This is the default.
- zero: every block is zeros, byte-compatible with the original gateway.
  The old content is overwritten but the result is predictable.
"""

import logging
import os
from enum import Enum

from shadowvault.lifecycle.errors import IoFailure
from shadowvault.lifecycle.models import BLOCK_SIZE, DEFAULT_CRUSH_PASSES

logger = logging.getLogger(__name__)

# fdatasync is not available on every platform
_datasync = getattr(os, "fdatasync", os.fsync)


class CrushFill(str, Enum):
    """Content written over a file during a crush pass."""

    RANDOM = "random"
    ZERO = "zero"


def _fill_block(fill: CrushFill, size: int, zeros: bytes) -> bytes:
    if fill == CrushFill.RANDOM:
        return os.urandom(size)
    return zeros[:size]


def _write_all(fd: int, data: bytes, path: str) -> None:
    view = memoryview(data)
    while view:
        try:
            n = os.write(fd, view)
        except OSError as e:
            logger.error("write failed: fd %d, size %d, %s", fd, len(view), e.strerror)
            raise IoFailure("write", path, e) from e
        if n == 0:
            raise IoFailure("write", path, detail=f"wrote 0 of {len(view)} bytes")
        view = view[n:]


def _crush_pass(fd: int, fill: CrushFill, block_size: int, path: str) -> None:
    try:
        size = os.fstat(fd).st_size
    except OSError as e:
        logger.error("fstat failed: fd %d, %s", fd, e.strerror)
        raise IoFailure("fstat", path, e) from e

    zeros = bytes(block_size)
    left = size
    while left > 0:
        blocksize = min(left, block_size)
        _write_all(fd, _fill_block(fill, blocksize, zeros), path)
        left -= blocksize

    try:
        _datasync(fd)
    except OSError as e:
        logger.error("fdatasync failed: fd %d, %s", fd, e.strerror)
        raise IoFailure("fdatasync", path, e) from e


def crush_fd(
    fd: int,
    passes: int = DEFAULT_CRUSH_PASSES,
    *,
    fill: CrushFill = CrushFill.RANDOM,
    block_size: int = BLOCK_SIZE,
    path: str = "<fd>",
) -> None:
    """Overwrite the whole content of an open file ``passes`` times.

    The file length is left unchanged and the descriptor stays open.

    Args:
        fd: Descriptor opened for writing.
        passes: Number of overwrite passes (at least 1).
        fill: Content written on each pass.
        block_size: Size of each write.
        path: Path used in error messages.

    Raises:
        ValueError: If passes or block_size is less than 1.
        IoFailure: If a seek, stat, write or sync fails.
    """
    if passes < 1:
        msg = f"Crush passes must be at least 1, got {passes}"
        raise ValueError(msg)
    if block_size < 1:
        msg = f"Block size must be at least 1, got {block_size}"
        raise ValueError(msg)

    for i in range(passes):
        try:
            os.lseek(fd, 0, os.SEEK_SET)
        except OSError as e:
            logger.error("lseek failed: fd %d, offset 0, %s", fd, e.strerror)
            raise IoFailure("lseek", path, e) from e
        _crush_pass(fd, fill, block_size, path)
        logger.debug("crush pass %d/%d done: %s", i + 1, passes, path)


def crush_path(
    path: str,
    passes: int = DEFAULT_CRUSH_PASSES,
    *,
    fill: CrushFill = CrushFill.RANDOM,
    block_size: int = BLOCK_SIZE,
) -> None:
    """Crush a file and remove its directory entry.

    The descriptor is closed on every exit path.

    Args:
        path: File to destroy.
        passes: Number of overwrite passes (at least 1).
        fill: Content written on each pass.
        block_size: Size of each write.

    Raises:
        ValueError: If passes or block_size is less than 1.
        IoFailure: If the file cannot be opened, a pass fails, or the
            entry cannot be removed.
    """
    try:
        fd = os.open(path, os.O_RDWR)
    except OSError as e:
        logger.error("open failed: filepath %s, %s", path, e.strerror)
        raise IoFailure("open", path, e) from e

    try:
        crush_fd(fd, passes, fill=fill, block_size=block_size, path=path)
        try:
            os.remove(path)
        except OSError as e:
            logger.error("remove failed: filepath %s, %s", path, e.strerror)
            raise IoFailure("remove", path, e) from e
    finally:
        os.close(fd)

    logger.info("Crushed %s (%d passes, %s fill)", path, passes, fill.value)
