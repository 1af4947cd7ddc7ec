"""Tests for file_handler module: encoding-aware reads, atomic writes, removal."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from content_sync.file_handler import (
    read_file_with_encoding,
    remove_file,
    write_file_atomic,
)

# =============================================================================
# read_file_with_encoding
# =============================================================================


class TestReadFileWithEncoding:
    """Tests for read_file_with_encoding(path)."""

    def test_utf8_file(self, tmp_path):
        """UTF-8 content is decoded as utf-8."""
        f = tmp_path / "doc.ini"
        f.write_bytes("[strings_es]\nbook=Reservá ahora, señor\n".encode("utf-8"))
        content, encoding = read_file_with_encoding(f)
        assert "Reservá" in content
        assert encoding.replace("_", "-").lower() == "utf-8"

    def test_ascii_reported_as_utf8(self, tmp_path):
        """Pure ASCII is reported as utf-8."""
        f = tmp_path / "doc.ini"
        f.write_bytes(b"[config]\nconfig_updated=2024-01-01-00-00\n")
        content, encoding = read_file_with_encoding(f)
        assert content.startswith("[config]")
        assert encoding in ("utf-8", "utf_8")

    def test_empty_file(self, tmp_path):
        """Empty file returns empty string with utf-8."""
        f = tmp_path / "empty.ini"
        f.write_bytes(b"")
        assert read_file_with_encoding(f) == ("", "utf-8")

    @pytest.mark.parametrize(
        "text",
        ["€5", "piña", "¿Qué?", "price=Precio €\napp_name_es=Cébaco\n"],
    )
    def test_short_utf8_values_not_misdetected(self, tmp_path, text):
        """Short non-ASCII UTF-8 never goes through codepage detection."""
        f = tmp_path / "value"
        f.write_bytes(text.encode("utf-8"))
        with patch("content_sync.file_handler.from_bytes") as mock_detect:
            assert read_file_with_encoding(f) == (text, "utf-8")
        mock_detect.assert_not_called()

    def test_non_utf8_bytes_detected(self, tmp_path):
        """Bytes that are not valid UTF-8 fall back to detection."""
        f = tmp_path / "legacy.ini"
        f.write_bytes("[strings_es]\nbook=Reservá\n".encode("cp1252"))
        match = MagicMock(encoding="cp1252")
        match.__str__.return_value = "[strings_es]\nbook=Reservá\n"
        with patch("content_sync.file_handler.from_bytes") as mock_detect:
            mock_detect.return_value.best.return_value = match
            content, encoding = read_file_with_encoding(f)
        assert content == "[strings_es]\nbook=Reservá\n"
        assert encoding == "cp1252"

    def test_undetectable_bytes_replaced(self, tmp_path):
        f = tmp_path / "junk"
        f.write_bytes(b"ok\xff")
        with patch("content_sync.file_handler.from_bytes") as mock_detect:
            mock_detect.return_value.best.return_value = None
            content, encoding = read_file_with_encoding(f)
        assert content == "ok\ufffd"
        assert encoding == "utf-8"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_file_with_encoding(tmp_path / "missing")


# =============================================================================
# write_file_atomic
# =============================================================================


class TestWriteFileAtomic:
    """Tests for write_file_atomic(path, content)."""

    def test_writes_and_returns_byte_count(self, tmp_path):
        f = tmp_path / "out.ini"
        written = write_file_atomic(f, "ñ")
        assert written == 2
        assert f.read_text(encoding="utf-8") == "ñ"

    def test_creates_parent_directories(self, tmp_path):
        f = tmp_path / "a" / "b" / "out.ini"
        write_file_atomic(f, "x")
        assert f.read_text() == "x"

    def test_replaces_existing(self, tmp_path):
        f = tmp_path / "out.ini"
        f.write_text("old")
        write_file_atomic(f, "new")
        assert f.read_text() == "new"

    def test_failure_leaves_original_and_no_temp(self, tmp_path):
        """A failed replace keeps the old file and cleans up the temp file."""
        f = tmp_path / "out.ini"
        f.write_text("old")
        with patch(
            "content_sync.file_handler.os.replace",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(OSError, match="disk full"):
                write_file_atomic(f, "new")
        assert f.read_text() == "old"
        assert not list(tmp_path.glob("*.tmp"))


# =============================================================================
# remove_file
# =============================================================================


class TestRemoveFile:
    """Tests for remove_file(path)."""

    def test_removes_existing(self, tmp_path: Path):
        f = tmp_path / "x"
        f.write_text("x")
        assert remove_file(f) is True
        assert not f.exists()

    def test_missing_returns_false(self, tmp_path: Path):
        assert remove_file(tmp_path / "missing") is False
