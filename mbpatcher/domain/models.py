"""Domain model for updater-script patching.

Plain value objects handed to the patcher: which partitions exist, what the
target device calls them, and which patch targets keep their device checks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


# ==============================================================================
# Partition Domain
# ==============================================================================


class Partition(Enum):
    """Logical partitions recognized in updater-scripts."""

    SYSTEM = "system"
    CACHE = "cache"
    DATA = "data"

    @property
    def mount_point(self) -> str:
        """Canonical absolute path (e.g., /system)."""
        return f"/{self.value}"


# ==============================================================================
# Device Domain
# ==============================================================================


@dataclass(frozen=True)
class Device:
    """A target device and its raw partition paths.

    Partition paths are device specific block paths such as
    ``/dev/block/platform/msm_sdcc.1/by-name/system``. A logical partition
    that the device does not define maps to an empty string.
    """

    codename: str  # e.g., "hammerhead"
    name: str = ""  # e.g., "Google Nexus 5"
    partitions: Mapping[str, str] = field(default_factory=dict)

    def partition(self, name: str) -> str:
        """Raw path for a logical partition name, or "" if unmapped."""
        return self.partitions.get(name) or ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Device:
        """Build a Device from a registry entry.

        Args:
            data: Dict with keys: codename, name (optional), partitions (optional)

        Raises:
            KeyError: If codename is missing
            TypeError: If partitions is not a mapping
        """
        partitions = data.get("partitions") or {}
        if not isinstance(partitions, dict):
            raise TypeError("partitions must be a mapping")
        return cls(
            codename=data["codename"],
            name=data.get("name", ""),
            partitions={str(k): str(v) for k, v in partitions.items() if v},
        )


# ==============================================================================
# Patch Info Domain
# ==============================================================================


DEFAULT_KEY = "default"


@dataclass(frozen=True)
class PatchInfo:
    """Per-target patch options.

    ``matches`` holds filename regexes; the first one that matches a ROM
    filename becomes that file's key. ``device_checks`` maps keys to whether
    the device-identity assertions should be kept.
    """

    name: str = ""
    matches: tuple[str, ...] = ()
    device_checks: Mapping[str, bool] = field(default_factory=dict)

    def key_from_filename(self, filename: str) -> str:
        for pattern in self.matches:
            if re.search(pattern, filename):
                return pattern
        return DEFAULT_KEY

    def device_check(self, key: str) -> bool:
        if key in self.device_checks:
            return self.device_checks[key]
        return self.device_checks.get(DEFAULT_KEY, True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PatchInfo:
        """Build PatchInfo from a patchinfo.json object.

        Raises:
            TypeError: If a pattern does not compile, device_checks is not a
                mapping, or one of its values is not a bool
        """
        matches = data.get("matches") or []
        if isinstance(matches, str):
            matches = [matches]
        for pattern in matches:
            try:
                re.compile(pattern)
            except re.error as error:
                raise TypeError(f"invalid filename pattern {pattern!r}: {error}") from error
        device_checks = data.get("device_checks") or {}
        if not isinstance(device_checks, dict):
            raise TypeError("device_checks must be a mapping")
        for key, value in device_checks.items():
            if not isinstance(value, bool):
                raise TypeError(f"device_checks[{key!r}] must be true or false")
        return cls(
            name=data.get("name", ""),
            matches=tuple(matches),
            device_checks={str(k): v for k, v in device_checks.items()},
        )


@dataclass(frozen=True)
class FileInfo:
    """The ROM being patched: its filename, target device and patch info."""

    filename: str
    device: Device
    patch_info: PatchInfo = field(default_factory=PatchInfo)

    def remove_device_checks(self) -> bool:
        """Whether device-identity assertions should be neutralized."""
        key = self.patch_info.key_from_filename(self.filename)
        return not self.patch_info.device_check(key)
