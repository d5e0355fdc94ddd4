"""File utility functions."""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from loguru import logger


class FileError(Exception):
    """Base class for file-related errors."""


class FileWriteError(FileError):
    """Error writing to a file."""


def ensure_directory(path: Union[str, Path]) -> None:
    """Create directory if it doesn't exist.

    Args:
        path: Path to directory to create
    """
    Path(path).mkdir(parents=True, exist_ok=True)


def write_file_atomic(path: Union[str, Path], content: str) -> None:
    """Write file atomically using a temporary file.

    Args:
        path: Path to write to
        content: Content to write

    Raises:
        FileWriteError: If the file cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    # Create temp file in same directory
    fd, temp_path = tempfile.mkstemp(dir=str(path.parent))
    success = False

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        # Atomic rename
        Path(temp_path).replace(path)
        success = True
    except OSError as e:
        raise FileWriteError(f"Failed to write {path}: {e}") from e
    finally:
        if not success:
            try:
                Path(temp_path).unlink()
            except OSError:
                pass


def read_text_file(path: Union[str, Path]) -> Optional[str]:
    """Read a UTF-8 text file.

    Args:
        path: Path to read

    Returns:
        The file content, or None if the file is missing or unreadable
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Could not read {path}: {e}")
        return None
