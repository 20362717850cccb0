"""Backup name synthesis.

A backup of ``dir/name`` lives at ``dir/<BackupDirectory>/name.<suffix>``
where the suffix is derived from the server clock. Backups of one origin
share ``name + "."`` as a prefix; that prefix is the only way to find
them again, there is no index.

Two suffix renderings exist:

- legacy: ``YYYY.MM.D.HMS.U`` with only the month zero-padded and hour,
  minute and second concatenated unpadded. Byte-compatible with backup
  sets written by the original gateway, but ambiguous (1:23:04 and
  12:03:04 both render as ``1234``).
- padded: ``YYYY.MM.DD.HHMMSS.UUUUUU``, fixed width and unambiguous.
"""

import os
import re
from datetime import datetime
from enum import Enum

from shadowvault.lifecycle.errors import InvalidPath
from shadowvault.lifecycle.models import BACKUP_DIR_NAME, NAME_MAX
from shadowvault.lifecycle.pathing import join_path, split_path


class BackupNameStyle(str, Enum):
    """Rendering of the timestamp suffix of a backup name."""

    PADDED = "padded"
    LEGACY = "legacy"


# Matches the suffix of both renderings
_SUFFIX_RE = re.compile(r"\d{4}\.\d{2}\.\d{1,2}\.\d{3,6}\.\d{1,6}")


def format_backup_suffix(
    timestamp: datetime,
    style: BackupNameStyle = BackupNameStyle.PADDED,
) -> str:
    """Render the timestamp suffix of a backup name.

    Args:
        timestamp: Server wall-clock time (local time).
        style: Suffix rendering.

    Returns:
        Suffix without the leading dot.
    """
    t = timestamp
    if style == BackupNameStyle.LEGACY:
        return (
            f"{t.year}.{t.month:02d}.{t.day}."
            f"{t.hour}{t.minute}{t.second}.{t.microsecond}"
        )
    return (
        f"{t.year:04d}.{t.month:02d}.{t.day:02d}."
        f"{t.hour:02d}{t.minute:02d}{t.second:02d}.{t.microsecond:06d}"
    )


def make_backup_name(
    origin_path: str,
    timestamp: datetime,
    *,
    backup_dir_name: str = BACKUP_DIR_NAME,
    style: BackupNameStyle = BackupNameStyle.PADDED,
) -> str:
    """Build the backup path for an origin path at a given time.

    Absolute origins produce ``{dir}/{BackupDirectory}/{name}.{suffix}``.
    Relative origins stay relative: ``{reldir}/{BackupDirectory}/{name}.{suffix}``,
    or ``{BackupDirectory}/{name}.{suffix}`` for a bare name.

    No I/O is performed.

    Args:
        origin_path: Path of the object being retired.
        timestamp: Server clock at the moment of the call.
        backup_dir_name: Name of the reserved backup directory.
        style: Suffix rendering.

    Returns:
        Backup path.

    Raises:
        InvalidPath: If the origin has no basename or the result is too long.
    """
    managed = split_path(origin_path)
    name = f"{managed.basename}.{format_backup_suffix(timestamp, style)}"
    if len(os.fsencode(name)) > NAME_MAX:
        raise InvalidPath(f"Backup name exceeds {NAME_MAX} bytes: {name[:64]}...", origin_path)

    if os.path.isabs(origin_path):
        return join_path(managed.directory, backup_dir_name, name)

    reldir = os.path.dirname(origin_path.rstrip(os.sep))
    if reldir:
        return join_path(reldir, backup_dir_name, name)
    return join_path(backup_dir_name, name)


def is_backup_of(name: str, origin_basename: str) -> bool:
    """Check whether a backup basename belongs to an origin basename.

    The name must start with ``origin_basename + "."`` and the remainder
    must be a backup timestamp suffix, so ``foo.<suffix>`` is not mistaken
    for a backup of ``f`` and ``a.b.<suffix>`` not for a backup of ``a``.

    Args:
        name: Basename found in a BackupDirectory.
        origin_basename: Basename of the live object.

    Returns:
        True if ``name`` is a backup of ``origin_basename``.
    """
    prefix = origin_basename + "."
    if not name.startswith(prefix):
        return False
    return _SUFFIX_RE.fullmatch(name[len(prefix) :]) is not None


def backup_suffix(name: str, origin_basename: str) -> str:
    """Return the part of a backup basename after the origin basename.

    The returned value includes the leading dot.

    Raises:
        InvalidPath: If ``name`` does not start with ``origin_basename``.
    """
    if not name.startswith(origin_basename):
        msg = f"Backup {name!r} does not belong to {origin_basename!r}"
        raise InvalidPath(msg, name)
    return name[len(origin_basename) :]


def derive_renamed_backup_path(
    old_path: str,
    new_path: str,
    backup_path: str,
    *,
    backup_dir_name: str = BACKUP_DIR_NAME,
) -> str:
    """Compute where a backup goes when its origin is renamed.

    The old basename prefix is replaced by the new basename and the
    timestamp suffix is kept; the result lives in the BackupDirectory of
    the new path's directory, which may differ from the old one::

        old:    /123/aaa
        new:    /789/bbb
        backup: /123/<BackupDirectory>/aaa.2020.03.20.134623.000123
        result: /789/<BackupDirectory>/bbb.2020.03.20.134623.000123

    Raises:
        InvalidPath: If any path is malformed, the backup does not belong
            to the old basename, or the result is too long.
    """
    old = split_path(old_path)
    new = split_path(new_path)
    backup = split_path(backup_path)

    name = new.basename + backup_suffix(backup.basename, old.basename)
    if len(os.fsencode(name)) > NAME_MAX:
        raise InvalidPath(f"Renamed backup exceeds {NAME_MAX} bytes: {name[:64]}...", backup_path)
    return join_path(new.directory, backup_dir_name, name)
