"""Saved command line defaults.

The settings file is a small JSON object holding the device registry, patch
info file, default device codename, log directory and debug flag. Paths are
stored absolute so a saved default keeps working from any directory. Values
of the wrong type are dropped with a warning and the default is used.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mbpatcher.logging import LoggerFactory


SETTINGS_PATH = Path(
    os.environ.get(
        "MBPATCHER_SETTINGS_PATH",
        Path.home() / ".config" / "mbpatcher" / "settings.json",
    )
)

DEFAULT_SETTINGS: dict[str, Any] = {
    "devices_file": None,
    "patchinfo_file": None,
    "default_device": None,
    "log_dir": None,
    "debug": False,
}

PATH_KEYS = ("devices_file", "patchinfo_file", "log_dir")

_SETTING_TYPES: dict[str, type] = {
    "devices_file": str,
    "patchinfo_file": str,
    "default_device": str,
    "log_dir": str,
    "debug": bool,
}


@dataclass
class SettingsStore:
    values: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_SETTINGS))


settings_store = SettingsStore()


def _known_values(data: dict[str, Any]) -> dict[str, Any]:
    log = LoggerFactory.for_config()
    values = {}
    for key, value in data.items():
        expected = _SETTING_TYPES.get(key)
        if expected is None:
            log.warning(f"Ignoring unknown setting {key!r} in {SETTINGS_PATH}")
        elif value is not None and not isinstance(value, expected):
            log.warning(
                f"Ignoring setting {key!r} in {SETTINGS_PATH}: "
                f"expected {expected.__name__}, got {value!r}"
            )
        else:
            values[key] = value
    return values


def load_settings() -> None:
    """Reset to the defaults, then apply the settings file if it is usable."""
    settings_store.values = dict(DEFAULT_SETTINGS)
    if not SETTINGS_PATH.exists():
        return
    log = LoggerFactory.for_config()
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        log.warning(f"Ignoring unreadable settings file {SETTINGS_PATH}: {error}")
        return
    if not isinstance(data, dict):
        log.warning(f"Ignoring settings file {SETTINGS_PATH}: expected a JSON object")
        return
    settings_store.values.update(_known_values(data))


def save_settings() -> None:
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(settings_store.values, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def get_setting(key: str, default: Any | None = None) -> Any:
    value = settings_store.values.get(key)
    return default if value is None else value


def get_path(key: str) -> Path | None:
    """A path setting, or None when unset."""
    value = get_setting(key)
    return Path(value) if value else None


def get_bool(key: str, default: bool = False) -> bool:
    return bool(get_setting(key, default))


def update_settings(values: dict[str, Any]) -> None:
    """Store the given values and write the settings file once.

    None values are skipped, so callers can pass every option they know about.

    Raises:
        KeyError: If a key is not a known setting
        OSError: If the settings file cannot be written
    """
    for key, value in values.items():
        if key not in DEFAULT_SETTINGS:
            raise KeyError(f"Unknown setting: {key}")
        if value is None:
            continue
        if key in PATH_KEYS:
            value = str(Path(value).expanduser().absolute())
        settings_store.values[key] = value
    save_settings()
