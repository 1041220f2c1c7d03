"""Custom exceptions for patching operations.

The rewriting passes themselves never fail: every line either qualifies for a
rewrite or passes through unchanged. These exceptions cover the boundary
around them (reading and writing the script, loading configuration).

Exception Hierarchy:
    PatcherError (base)
        ├── FileAccessError
        │   ├── FileReadError
        │   └── FileWriteError
        └── ConfigurationError
            ├── DeviceNotFoundError
            └── InvalidConfigError

Usage:
    from mbpatcher.patcher.exceptions import FileReadError

    try:
        contents = read_to_memory(path)
    except FileReadError as error:
        log.error(str(error))
"""

from __future__ import annotations

from pathlib import Path


class PatcherError(Exception):
    """Base exception for all patching operations."""


class FileAccessError(PatcherError):
    """Base exception for file access errors."""

    def __init__(self, path: str | Path, message: str):
        self.path = str(path)
        super().__init__(message)


class FileReadError(FileAccessError):
    """File is missing or could not be read."""

    def __init__(self, path: str | Path, reason: str = ""):
        self.reason = reason
        msg = f"Failed to read {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(path, msg)


class FileWriteError(FileAccessError):
    """File could not be written."""

    def __init__(self, path: str | Path, reason: str = ""):
        self.reason = reason
        msg = f"Failed to write {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(path, msg)


class ConfigurationError(PatcherError):
    """Base exception for configuration errors."""


class DeviceNotFoundError(ConfigurationError):
    """Device codename is not defined in the device registry."""

    def __init__(self, codename: str):
        self.codename = codename
        super().__init__(f"Device not found: {codename}")


class InvalidConfigError(ConfigurationError):
    """Configuration file is malformed."""

    def __init__(self, source: str | Path, reason: str):
        self.source = str(source)
        self.reason = reason
        super().__init__(f"Invalid configuration in {source}: {reason}")
