"""Domain models for updater-script patching."""

from __future__ import annotations

from .models import (
    DEFAULT_KEY,
    Device,
    FileInfo,
    Partition,
    PatchInfo,
)


__all__ = [
    "DEFAULT_KEY",
    "Device",
    "FileInfo",
    "Partition",
    "PatchInfo",
]
