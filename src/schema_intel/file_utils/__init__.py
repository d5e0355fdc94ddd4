"""Schema Intel file utilities."""

from .gitignore import should_ignore_file, get_gitignore_patterns, build_gitignore_spec
from .file_utils import (
    FileError,
    FileWriteError,
    ensure_directory,
    read_text_file,
    write_file_atomic,
)

__all__ = [
    "FileError",
    "FileWriteError",
    "ensure_directory",
    "read_text_file",
    "write_file_atomic",
    "should_ignore_file",
    "get_gitignore_patterns",
    "build_gitignore_spec",
]
