"""Utilities for file operations."""

import os
import tempfile
from pathlib import Path

from loguru import logger


class FileError(Exception):
    """Base exception for file operations."""

    pass


class StateFileError(FileError):
    """Raised when the state file exists but cannot be read or parsed."""

    pass


class StateWriteError(FileError):
    """Raised when the state file cannot be written."""

    pass


def write_file_atomic(path: Path, content: bytes) -> None:
    """
    Write file with atomic operation using temporary file.

    The temporary file is created in the target's directory so the final
    rename never crosses a filesystem boundary. Readers either see the old
    file or the complete new one.

    Args:
        path: Target file path
        content: Content to write

    Raises:
        StateWriteError: If write operation fails
    """
    temp_path = None
    try:
        fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        temp_path = Path(temp_name)
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except OSError as e:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        logger.error(f"Failed to write file: {path}: {e}")
        raise StateWriteError(f"Failed to write file {path}: {e}") from e
