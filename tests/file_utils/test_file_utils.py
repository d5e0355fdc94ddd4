"""Tests for file utilities."""

from pathlib import Path

import pytest

from schema_intel.file_utils import (
    FileError,
    FileWriteError,
    ensure_directory,
    read_text_file,
    write_file_atomic,
)


def test_write_file_atomic(tmp_path: Path):
    """Test atomic file writing."""
    test_file = tmp_path / "test.json"
    content = '{"id": "s1"}'

    write_file_atomic(test_file, content)
    assert test_file.exists()
    assert test_file.read_text(encoding="utf-8") == content

    # Temp file should be cleaned up
    assert list(tmp_path.iterdir()) == [test_file]


def test_write_file_atomic_replaces_existing(tmp_path: Path):
    test_file = tmp_path / "test.json"
    test_file.write_text("old", encoding="utf-8")

    write_file_atomic(test_file, "new")
    assert test_file.read_text(encoding="utf-8") == "new"


def test_write_file_atomic_creates_parents(tmp_path: Path):
    test_file = tmp_path / "a" / "b" / "test.json"
    write_file_atomic(test_file, "{}")
    assert test_file.read_text(encoding="utf-8") == "{}"


def test_write_file_atomic_error(tmp_path: Path):
    """Test error handling in atomic write."""
    target = tmp_path / "taken"
    target.mkdir()

    # Replacing a directory with a file fails
    with pytest.raises(FileWriteError):
        write_file_atomic(target, "content")

    assert [p.name for p in tmp_path.iterdir()] == ["taken"]


def test_file_write_error_is_file_error():
    assert issubclass(FileWriteError, FileError)


def test_ensure_directory(tmp_path: Path):
    """Test directory creation."""
    test_dir = tmp_path / "test_dir" / "nested"

    ensure_directory(test_dir)
    assert test_dir.is_dir()

    # Existing directory is fine
    ensure_directory(test_dir)
    assert test_dir.is_dir()


def test_read_text_file(tmp_path: Path):
    test_file = tmp_path / "schema.ts"
    test_file.write_text("export default defineSchema({});", encoding="utf-8")
    assert read_text_file(test_file) == "export default defineSchema({});"


def test_read_text_file_missing(tmp_path: Path):
    assert read_text_file(tmp_path / "missing.ts") is None


def test_read_text_file_not_utf8(tmp_path: Path):
    test_file = tmp_path / "binary.ts"
    test_file.write_bytes(b"\xff\xfe\x00bad")
    assert read_text_file(test_file) is None


def test_read_text_file_directory(tmp_path: Path):
    assert read_text_file(tmp_path) is None
