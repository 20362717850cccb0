"""Unit tests for directory-creating file operations."""

import errno
import stat
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from shadowvault.lifecycle.errors import IoFailure, RenameFailure
from shadowvault.lifecycle.fileops import _write_block, copy_file, create_with_size, move_file


class TestMoveFile:
    """Tests for move_file function."""

    def test_moves_into_new_directory(self, tmp_path: Path) -> None:
        """Missing destination directories are created."""
        src = tmp_path / "f"
        src.write_bytes(b"data")
        dst = tmp_path / "a" / "b" / "g"

        result = move_file(str(src), str(dst))

        assert result == str(dst)
        assert dst.read_bytes() == b"data"
        assert not src.exists()

    def test_missing_source(self, tmp_path: Path) -> None:
        """Moving a missing file raises RenameFailure with ENOENT."""
        with pytest.raises(RenameFailure) as exc_info:
            move_file(str(tmp_path / "missing"), str(tmp_path / "dst"))

        assert exc_info.value.errno == errno.ENOENT
        assert exc_info.value.source == str(tmp_path / "missing")
        assert exc_info.value.destination == str(tmp_path / "dst")

    def test_moves_directories(self, tmp_path: Path) -> None:
        """Directories can be moved too."""
        src = tmp_path / "d"
        src.mkdir()
        (src / "inner").write_text("x")

        move_file(str(src), str(tmp_path / "e" / "d2"))

        assert (tmp_path / "e" / "d2" / "inner").read_text() == "x"


class TestCopyFile:
    """Tests for copy_file function."""

    def test_copies_bytes(self, tmp_path: Path) -> None:
        """Every byte is copied, across several blocks."""
        payload = bytes(range(256)) * 100
        src = tmp_path / "src"
        src.write_bytes(payload)
        dst = tmp_path / "out" / "dst"

        copied = copy_file(str(src), str(dst), block_size=1000)

        assert copied == len(payload)
        assert dst.read_bytes() == payload
        assert src.read_bytes() == payload

    def test_truncates_existing_destination(self, tmp_path: Path) -> None:
        """An existing destination is replaced."""
        src = tmp_path / "src"
        src.write_bytes(b"short")
        dst = tmp_path / "dst"
        dst.write_bytes(b"much longer content")

        copy_file(str(src), str(dst))

        assert dst.read_bytes() == b"short"

    def test_new_file_mode(self, tmp_path: Path) -> None:
        """New destinations are created with the requested mode."""
        src = tmp_path / "src"
        src.write_bytes(b"x")
        dst = tmp_path / "dst"

        copy_file(str(src), str(dst), file_mode=0o600)

        assert stat.S_IMODE(dst.stat().st_mode) == 0o600

    def test_empty_file(self, tmp_path: Path) -> None:
        """Empty files copy to empty files."""
        src = tmp_path / "src"
        src.write_bytes(b"")

        assert copy_file(str(src), str(tmp_path / "dst")) == 0
        assert (tmp_path / "dst").read_bytes() == b""

    def test_missing_source(self, tmp_path: Path) -> None:
        """A missing source fails at open and creates nothing."""
        with pytest.raises(IoFailure) as exc_info:
            copy_file(str(tmp_path / "missing"), str(tmp_path / "dst"))

        assert exc_info.value.step == "open"
        assert exc_info.value.path == str(tmp_path / "missing")
        assert not (tmp_path / "dst").exists()

    def test_destination_is_directory(self, tmp_path: Path) -> None:
        """A destination that cannot be opened fails at open."""
        src = tmp_path / "src"
        src.write_bytes(b"x")
        (tmp_path / "dst").mkdir()

        with pytest.raises(IoFailure) as exc_info:
            copy_file(str(src), str(tmp_path / "dst"))

        assert exc_info.value.path == str(tmp_path / "dst")

    def test_short_write_is_fatal(self) -> None:
        """A short write raises instead of retrying."""
        dst = MagicMock()
        dst.write.return_value = 3

        with pytest.raises(IoFailure, match="short write"):
            _write_block(dst, b"0123456789", "/data/x/f")

        dst.write.assert_called_once()

    def test_fstat_failure(self, tmp_path: Path) -> None:
        """A failing fstat raises IoFailure naming the source."""
        src = tmp_path / "src"
        src.write_bytes(b"0123456789")

        with (
            patch(
                "shadowvault.lifecycle.fileops.os.fstat",
                side_effect=OSError(errno.EIO, "Input/output error"),
            ),
            pytest.raises(IoFailure) as exc_info,
        ):
            copy_file(str(src), str(tmp_path / "dst"))

        assert exc_info.value.step == "fstat"
        assert exc_info.value.errno == errno.EIO


class TestCreateWithSize:
    """Tests for create_with_size function."""

    @pytest.mark.parametrize("size", [0, 1, 8191, 8192, 8193, 100_000])
    def test_size_round_trip(self, tmp_path: Path, size: int) -> None:
        """The created file has exactly the requested size, all zeros."""
        path = tmp_path / "new"

        create_with_size(str(path), size)

        assert path.stat().st_size == size
        assert path.read_bytes() == bytes(size)

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        """Missing parent directories are created."""
        path = tmp_path / "a" / "b" / "new"

        assert create_with_size(str(path), 10) == str(path)
        assert path.stat().st_size == 10

    def test_truncates_existing_file(self, tmp_path: Path) -> None:
        """An existing file is truncated to the new size."""
        path = tmp_path / "existing"
        path.write_bytes(b"x" * 100)

        create_with_size(str(path), 5)

        assert path.read_bytes() == bytes(5)

    def test_negative_size(self, tmp_path: Path) -> None:
        """Negative sizes are rejected."""
        with pytest.raises(ValueError, match="negative"):
            create_with_size(str(tmp_path / "new"), -1)
