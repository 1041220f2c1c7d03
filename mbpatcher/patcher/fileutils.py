"""Read and write whole files for the patcher."""

from __future__ import annotations

from pathlib import Path

from mbpatcher.logging import LoggerFactory
from mbpatcher.patcher.exceptions import FileReadError, FileWriteError


log = LoggerFactory.for_system()


def read_to_memory(path: str | Path) -> bytes:
    """Read a file's full contents.

    Raises:
        FileReadError: If the file is missing or unreadable
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as error:
        raise FileReadError(path, error.strerror or str(error)) from error
    log.debug(f"Read {len(data)} bytes from {path}")
    return data


def write_from_memory(path: str | Path, data: bytes) -> None:
    """Replace a file's contents.

    Raises:
        FileWriteError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.write_bytes(data)
    except OSError as error:
        raise FileWriteError(path, error.strerror or str(error)) from error
    log.debug(f"Wrote {len(data)} bytes to {path}")
