"""Recursive directory traversal.

Depth-first, pre-order walk over regular files that never enters a
BackupDirectory. The first error (directory open, entry stat, action,
or recursion) aborts the whole walk; there is no partial-success
accumulation. Entry order is whatever the filesystem enumerates.
"""

import logging
import os
import stat
from collections.abc import Callable, Iterator
from typing import Any

from shadowvault.lifecycle.errors import IoFailure
from shadowvault.lifecycle.models import BACKUP_DIR_NAME
from shadowvault.lifecycle.naming import is_backup_of

logger = logging.getLogger(__name__)

# action(path, stat_result, user_data) -> True to continue, False to stop
WalkAction = Callable[[str, os.stat_result, Any], bool]


def iter_tree(
    dirpath: str,
    *,
    backup_dir_name: str = BACKUP_DIR_NAME,
    recursive: bool = True,
    match: Callable[[str], bool] | None = None,
) -> Iterator[tuple[str, os.stat_result]]:
    """Lazily yield ``(path, stat_result)`` for every regular file under a directory.

    Entries named ``backup_dir_name`` are skipped at every level (os.scandir
    never yields "." or ".."). Entry metadata follows symlinks, like stat(2);
    anything that is neither a regular file nor a directory is skipped.

    Each directory handle is released when its level is exhausted or
    the generator is closed.

    With ``recursive=False`` only the direct children of ``dirpath`` are
    considered and subdirectories are never entered. ``match`` filters
    entry names at every level, directories included, before they are
    stat'ed, so rejected entries are never touched.

    Args:
        dirpath: Root directory of the walk.
        backup_dir_name: Reserved directory name to skip.
        recursive: Descend into subdirectories.
        match: Predicate on entry names; entries it rejects are skipped.

    Yields:
        Tuples of file path and its stat result.

    Raises:
        IoFailure: If a directory cannot be opened or read, or an entry
            cannot be stat'ed.
    """
    try:
        entries = os.scandir(dirpath)
    except OSError as e:
        logger.error("opendir failed: dirpath %s, %s", dirpath, e.strerror)
        raise IoFailure("opendir", dirpath, e) from e

    with entries:
        while True:
            try:
                entry = next(entries)
            except StopIteration:
                return
            except OSError as e:
                logger.error("readdir failed: dirpath %s, %s", dirpath, e.strerror)
                raise IoFailure("readdir", dirpath, e) from e

            if entry.name == backup_dir_name:
                continue
            if match is not None and not match(entry.name):
                continue

            try:
                st = entry.stat()
            except OSError as e:
                logger.error("stat failed: filepath %s, %s", entry.path, e.strerror)
                raise IoFailure("stat", entry.path, e) from e

            if stat.S_ISREG(st.st_mode):
                yield entry.path, st
            elif recursive and stat.S_ISDIR(st.st_mode):
                yield from iter_tree(
                    entry.path, backup_dir_name=backup_dir_name, recursive=True, match=match
                )


def walk_tree(
    dirpath: str,
    action: WalkAction,
    user_data: Any = None,
    *,
    backup_dir_name: str = BACKUP_DIR_NAME,
    recursive: bool = True,
    match: Callable[[str], bool] | None = None,
) -> bool:
    """Invoke an action on every regular file under a directory.

    Errors raised by the action propagate unchanged and abort the walk.

    Args:
        dirpath: Root directory of the walk.
        action: Called as ``action(path, stat_result, user_data)``;
            returning False stops the walk.
        user_data: Opaque value passed through to the action.
        backup_dir_name: Reserved directory name to skip.
        recursive: Descend into subdirectories.
        match: Predicate on entry names, see iter_tree.

    Returns:
        True if every file was visited, False if the action stopped the walk.

    Raises:
        IoFailure: If the traversal itself fails.
    """
    walker = iter_tree(
        dirpath, backup_dir_name=backup_dir_name, recursive=recursive, match=match
    )
    try:
        for path, st in walker:
            if not action(path, st, user_data):
                logger.debug("walk stopped by action at %s", path)
                return False
    finally:
        walker.close()
    return True


def iter_backups(
    dirpath: str,
    origin_basename: str,
    *,
    backup_dir_name: str = BACKUP_DIR_NAME,
) -> Iterator[tuple[str, os.stat_result]]:
    """Lazily yield the backups of one origin file.

    Lists the direct children of ``dirpath``'s BackupDirectory whose name
    matches the origin basename prefix and that are regular files. Retired
    directories are never entered and non-matching entries are never
    stat'ed. A missing BackupDirectory yields nothing.

    Args:
        dirpath: Directory containing the origin file.
        origin_basename: Basename of the origin file.
        backup_dir_name: Reserved directory name.

    Yields:
        Tuples of backup path and its stat result.

    Raises:
        IoFailure: If the BackupDirectory exists but cannot be walked.
    """
    backup_dir = os.path.join(dirpath, backup_dir_name)
    if not os.path.isdir(backup_dir):
        return

    yield from iter_tree(
        backup_dir,
        backup_dir_name=backup_dir_name,
        recursive=False,
        match=lambda name: is_backup_of(name, origin_basename),
    )
