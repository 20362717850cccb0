"""Unit tests for recursive directory traversal."""

import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from shadowvault.lifecycle.errors import IoFailure
from shadowvault.lifecycle.models import BACKUP_DIR_NAME
from shadowvault.lifecycle.walker import iter_backups, iter_tree, walk_tree


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """Create a small tree with a BackupDirectory at two levels."""
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.txt").write_text("b")
    (tmp_path / "sub" / "deeper").mkdir()
    (tmp_path / "sub" / "deeper" / "c.txt").write_text("c")
    (tmp_path / BACKUP_DIR_NAME).mkdir()
    (tmp_path / BACKUP_DIR_NAME / "a.txt.2020.03.20.134623.000123").write_text("old")
    (tmp_path / "sub" / BACKUP_DIR_NAME).mkdir()
    (tmp_path / "sub" / BACKUP_DIR_NAME / "b.txt.2020.03.20.134623.000123").write_text("old")
    return tmp_path


class TestIterTree:
    """Tests for iter_tree function."""

    def test_yields_regular_files_recursively(self, tree: Path) -> None:
        """Every regular file is yielded once."""
        paths = {path for path, _ in iter_tree(str(tree))}

        assert paths == {
            str(tree / "a.txt"),
            str(tree / "sub" / "b.txt"),
            str(tree / "sub" / "deeper" / "c.txt"),
        }

    def test_skips_backup_directories(self, tree: Path) -> None:
        """BackupDirectories are never entered."""
        paths = [path for path, _ in iter_tree(str(tree))]

        assert not any(BACKUP_DIR_NAME in p for p in paths)

    def test_custom_backup_dir_name(self, tree: Path) -> None:
        """Only the configured name is skipped."""
        paths = [path for path, _ in iter_tree(str(tree), backup_dir_name=".other")]

        assert str(tree / BACKUP_DIR_NAME / "a.txt.2020.03.20.134623.000123") in paths

    def test_stat_follows_symlinks(self, tree: Path) -> None:
        """Symlinks to files are yielded with the target's metadata."""
        (tree / "link").symlink_to(tree / "a.txt")

        results = dict(iter_tree(str(tree)))

        assert results[str(tree / "link")].st_size == 1

    def test_dangling_symlink_fails(self, tree: Path) -> None:
        """An entry that cannot be stat'ed aborts the walk."""
        (tree / "dangling").symlink_to(tree / "missing")

        with pytest.raises(IoFailure) as exc_info:
            list(iter_tree(str(tree)))

        assert exc_info.value.step == "stat"

    def test_missing_directory(self, tmp_path: Path) -> None:
        """A root that cannot be opened raises IoFailure."""
        with pytest.raises(IoFailure) as exc_info:
            list(iter_tree(str(tmp_path / "missing")))

        assert exc_info.value.step == "opendir"
        assert exc_info.value.errno is not None

    def test_empty_directory(self, tmp_path: Path) -> None:
        """An empty directory yields nothing."""
        assert list(iter_tree(str(tmp_path))) == []


class TestWalkTree:
    """Tests for walk_tree function."""

    def test_action_receives_user_data(self, tree: Path) -> None:
        """The action gets path, stat result and user data."""
        seen: list[tuple[str, int]] = []

        def action(path: str, st: os.stat_result, data: Any) -> bool:
            data.append((path, st.st_size))
            return True

        assert walk_tree(str(tree), action, seen) is True
        assert (str(tree / "a.txt"), 1) in seen
        assert len(seen) == 3

    def test_action_can_stop_walk(self, tree: Path) -> None:
        """Returning False stops the walk and returns False."""
        calls: list[str] = []

        def action(path: str, st: os.stat_result, data: Any) -> bool:
            calls.append(path)
            return False

        assert walk_tree(str(tree), action) is False
        assert len(calls) == 1

    def test_action_error_propagates(self, tree: Path) -> None:
        """Errors raised by the action abort the walk unchanged."""

        def action(path: str, st: os.stat_result, data: Any) -> bool:
            msg = "boom"
            raise RuntimeError(msg)

        with pytest.raises(RuntimeError, match="boom"):
            walk_tree(str(tree), action)

    def test_readdir_failure(self, tree: Path) -> None:
        """A failure while reading entries raises IoFailure."""

        class FailingScandir:
            def __enter__(self) -> "FailingScandir":
                return self

            def __exit__(self, *args: object) -> None:
                return None

            def __iter__(self) -> "FailingScandir":
                return self

            def __next__(self) -> os.DirEntry[str]:
                raise OSError(5, "Input/output error")

        with (
            patch("shadowvault.lifecycle.walker.os.scandir", return_value=FailingScandir()),
            pytest.raises(IoFailure) as exc_info,
        ):
            walk_tree(str(tree), lambda *_: True)

        assert exc_info.value.step == "readdir"


class TestIterBackups:
    """Tests for iter_backups function."""

    def test_yields_matching_backups(self, tree: Path) -> None:
        """Only backups of the origin are yielded."""
        (tree / BACKUP_DIR_NAME / "ab.txt.2020.03.20.134623.000123").write_text("x")

        paths = [path for path, _ in iter_backups(str(tree), "a.txt")]

        assert paths == [str(tree / BACKUP_DIR_NAME / "a.txt.2020.03.20.134623.000123")]

    def test_missing_backup_directory(self, tmp_path: Path) -> None:
        """No BackupDirectory means no backups."""
        assert list(iter_backups(str(tmp_path), "f")) == []

    def test_ignores_files_in_retired_directories(self, tree: Path) -> None:
        """Files inside a retired directory are not backups of the origin."""
        retired = tree / BACKUP_DIR_NAME / "sub.2020.03.20.134623.000123"
        retired.mkdir()
        (retired / "a.txt.2020.03.20.134623.000123").write_text("nested")

        paths = [path for path, _ in iter_backups(str(tree), "a.txt")]

        assert len(paths) == 1

    def test_does_not_enter_retired_directories(self, tree: Path) -> None:
        """Broken symlinks inside a retired directory are never stat'ed."""
        retired = tree / BACKUP_DIR_NAME / "sub.2020.03.20.134623.000123"
        retired.mkdir()
        (retired / "dangling").symlink_to("/nonexistent/target")
        (retired / "loop").symlink_to(retired / "loop")

        paths = [path for path, _ in iter_backups(str(tree), "a.txt")]

        assert paths == [str(tree / BACKUP_DIR_NAME / "a.txt.2020.03.20.134623.000123")]

    def test_unrelated_dangling_entry_is_skipped(self, tree: Path) -> None:
        """Entries that do not match the origin are not stat'ed."""
        (tree / BACKUP_DIR_NAME / "other.2020.03.20.134623.000123").symlink_to("/nonexistent")

        assert len(list(iter_backups(str(tree), "a.txt"))) == 1

    def test_matching_directory_is_not_a_backup(self, tree: Path) -> None:
        """A retired directory named like a backup of the origin is skipped."""
        (tree / BACKUP_DIR_NAME / "a.txt.2021.01.01.000000.000001").mkdir()

        assert len(list(iter_backups(str(tree), "a.txt"))) == 1


class TestNonRecursiveWalk:
    """Tests for the recursive and match options."""

    def test_iter_tree_non_recursive(self, tree: Path) -> None:
        """recursive=False yields only direct children."""
        paths = {path for path, _ in iter_tree(str(tree), recursive=False)}

        assert paths == {str(tree / "a.txt")}

    def test_match_filters_before_stat(self, tree: Path) -> None:
        """Entries rejected by match are never stat'ed."""
        (tree / "dangling").symlink_to("/nonexistent/target")

        paths = {
            path
            for path, _ in iter_tree(
                str(tree), recursive=False, match=lambda name: name != "dangling"
            )
        }

        assert paths == {str(tree / "a.txt")}

    def test_walk_tree_non_recursive(self, tree: Path) -> None:
        """walk_tree passes the options through."""
        seen: list[str] = []

        walk_tree(
            str(tree),
            lambda path, st, data: data.append(path) or True,
            seen,
            recursive=False,
        )

        assert seen == [str(tree / "a.txt")]
