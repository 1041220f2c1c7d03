"""Device and patch info registries loaded from JSON.

devices.json::

    [
        {
            "codename": "hammerhead",
            "name": "Google Nexus 5",
            "partitions": {
                "system": "/dev/block/platform/msm_sdcc.1/by-name/system",
                "cache": "/dev/block/platform/msm_sdcc.1/by-name/cache",
                "data": "/dev/block/platform/msm_sdcc.1/by-name/userdata"
            }
        }
    ]

patchinfo.json::

    {
        "name": "CyanogenMod",
        "matches": ["^cm-.*\\\\.zip$"],
        "device_checks": {"default": false}
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from mbpatcher.domain import Device, PatchInfo
from mbpatcher.logging import LoggerFactory
from mbpatcher.patcher.exceptions import (
    DeviceNotFoundError,
    FileReadError,
    InvalidConfigError,
)


log = LoggerFactory.for_config()


def _load_json(path: str | Path) -> Any:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as error:
        raise FileReadError(path, error.strerror or str(error)) from error
    try:
        return json.loads(text)
    except json.JSONDecodeError as error:
        raise InvalidConfigError(path, str(error)) from error


def load_devices(path: str | Path) -> dict[str, Device]:
    """Load a device registry, keyed by codename.

    Raises:
        FileReadError: If the file cannot be read
        InvalidConfigError: If the file is not a list of device objects
    """
    data = _load_json(path)
    if not isinstance(data, list):
        raise InvalidConfigError(path, "expected a list of devices")

    devices: dict[str, Device] = {}
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise InvalidConfigError(path, f"device #{index} is not an object")
        try:
            device = Device.from_dict(entry)
        except (KeyError, TypeError) as error:
            raise InvalidConfigError(path, f"device #{index}: {error}") from error
        if device.codename in devices:
            log.warning(f"Duplicate device codename {device.codename} in {path}")
        devices[device.codename] = device

    log.debug(f"Loaded {len(devices)} devices from {path}")
    return devices


def find_device(devices: Mapping[str, Device], codename: str) -> Device:
    """Look up a device by codename.

    Raises:
        DeviceNotFoundError: If no device has that codename
    """
    try:
        return devices[codename]
    except KeyError:
        raise DeviceNotFoundError(codename) from None


def load_patch_info(path: str | Path) -> PatchInfo:
    """Load patch info for a ROM family.

    Raises:
        FileReadError: If the file cannot be read
        InvalidConfigError: If the file is not a patch info object
    """
    data = _load_json(path)
    if not isinstance(data, dict):
        raise InvalidConfigError(path, "expected a patch info object")
    try:
        info = PatchInfo.from_dict(data)
    except TypeError as error:
        raise InvalidConfigError(path, str(error)) from error
    log.debug(f"Loaded patch info {info.name or '(unnamed)'} from {path}")
    return info
