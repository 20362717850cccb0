"""Unit tests for cli/display.py.

Tests for the shared Rich display functions used by the lifecycle commands.
"""

import io
from pathlib import Path

import pytest
from rich.console import Console
from shadowvault.cli.display import (
    create_backup_listing,
    create_swept_table,
    print_result,
)
from shadowvault.core.theme import get_theme
from shadowvault.lifecycle.models import LifecycleResult, OperationType

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def crush_result() -> LifecycleResult:
    """A successful crush that swept two backups."""
    return LifecycleResult(
        operation=OperationType.CRUSH,
        path="/d/f",
        success=True,
        swept=("/d/bk/f.1", "/d/bk/f.2"),
    )


@pytest.fixture
def delete_result() -> LifecycleResult:
    """A successful delete."""
    return LifecycleResult(
        operation=OperationType.DELETE,
        path="/d/f",
        success=True,
        backup_path="/d/bk/f.1",
    )


@pytest.fixture
def failed_rename() -> LifecycleResult:
    """A rename that failed after moving one backup."""
    return LifecycleResult(
        operation=OperationType.RENAME,
        path="/d/f",
        success=False,
        error="Permission denied",
        error_kind="partial_backup_sweep",
        swept=("/e/bk/g.1",),
    )


def _render(table: object) -> str:
    buf = io.StringIO()
    Console(theme=get_theme(), file=buf, color_system=None, width=200).print(table)
    return buf.getvalue()


def _capture_console_output(func: object, *args: object, **kwargs: object) -> str:
    """Capture Rich console output by temporarily replacing the consoles.

    Patches the module-level consoles used by display functions and captures
    stdout and stderr output to one StringIO buffer.
    """
    import shadowvault.cli.display as display_mod
    import shadowvault.utils.formatting as fmt_mod

    buf = io.StringIO()
    test_console = Console(theme=get_theme(), file=buf, color_system=None, width=200)

    originals = (display_mod.console, fmt_mod.console, fmt_mod.err_console)
    display_mod.console = test_console
    fmt_mod.console = test_console
    fmt_mod.err_console = test_console
    try:
        func(*args, **kwargs)  # type: ignore[operator]
    finally:
        display_mod.console, fmt_mod.console, fmt_mod.err_console = originals

    return buf.getvalue()


# ===========================================================================
# create_swept_table
# ===========================================================================


class TestCreateSweptTable:
    """Tests for create_swept_table."""

    def test_crush_title(self, crush_result: LifecycleResult) -> None:
        """Crush sweeps are titled as crushed backups."""
        table = create_swept_table(crush_result)

        assert table.title == "Crushed Backups"
        assert table.row_count == 2

    def test_rename_title(self, failed_rename: LifecycleResult) -> None:
        """Rename sweeps are titled as renamed backups."""
        table = create_swept_table(failed_rename)

        assert table.title == "Renamed Backups"
        assert "/e/bk/g.1" in _render(table)

    def test_markup_in_path_is_escaped(self) -> None:
        """Paths containing brackets render literally."""
        result = LifecycleResult(
            operation=OperationType.CRUSH,
            path="/d/[x]",
            success=True,
            swept=("/d/bk/[x].1",),
        )

        assert "[x].1" in _render(create_swept_table(result))


# ===========================================================================
# create_backup_listing
# ===========================================================================


class TestCreateBackupListing:
    """Tests for create_backup_listing."""

    def test_columns(self) -> None:
        """Listing has Backup, Size and Modified columns."""
        table = create_backup_listing([])
        assert [col.header for col in table.columns] == ["Backup", "Size", "Modified"]

    def test_rows_show_size(self, tmp_path: Path) -> None:
        """Existing backups show their size."""
        backup = tmp_path / "f.2020.03.20.134623.000123"
        backup.write_bytes(b"12345")

        output = _render(create_backup_listing([str(backup)]))

        assert "5 B" in output

    def test_vanished_backup(self, tmp_path: Path) -> None:
        """Backups that disappear are listed without details."""
        table = create_backup_listing([str(tmp_path / "gone")])

        assert table.row_count == 1
        assert "-" in _render(table)


# ===========================================================================
# print_result
# ===========================================================================


class TestPrintResult:
    """Tests for print_result."""

    def test_success_with_backup(self, delete_result: LifecycleResult) -> None:
        """Successful retirements name the backup."""
        output = _capture_console_output(print_result, delete_result)

        assert "Deleted /d/f" in output
        assert "backup: /d/bk/f.1" in output

    def test_success_with_sweep(self, crush_result: LifecycleResult) -> None:
        """Crushes list the swept backups."""
        output = _capture_console_output(print_result, crush_result)

        assert "Crushed /d/f" in output
        assert "Crushed Backups" in output

    def test_quiet_success(self, delete_result: LifecycleResult) -> None:
        """quiet suppresses success output."""
        assert _capture_console_output(print_result, delete_result, quiet=True) == ""

    def test_failure_shows_partial_sweep(self, failed_rename: LifecycleResult) -> None:
        """Failures are printed even in quiet mode, with processed backups."""
        output = _capture_console_output(print_result, failed_rename, quiet=True)

        assert "rename failed for /d/f: Permission denied" in output
        assert "1 backup(s) were processed" in output
        assert "/e/bk/g.1" in output
