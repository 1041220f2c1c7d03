"""Updater-script rewriting for multiboot installs.

Main Entry Points:
    - StandardPatcher: patches META-INF/com/google/android/updater-script
    - rewrite_script(): rewrite script text in memory

Passes:
    - replace_mount_lines()
    - replace_unmount_lines()
    - replace_format_lines()
    - remove_device_checks()

Helpers:
    - classify_line(): map a line to system, cache or data
"""

from .classifier import classify_line
from .rewriters import (
    DEFAULT_TEMPLATES,
    DEVICE_CHECK_BYPASS,
    ScriptTemplates,
    remove_device_checks,
    replace_format_lines,
    replace_mount_lines,
    replace_unmount_lines,
    rewrite_lines,
    rewrite_script,
)
from .standard import StandardPatcher


__all__ = [
    "DEFAULT_TEMPLATES",
    "DEVICE_CHECK_BYPASS",
    "ScriptTemplates",
    "StandardPatcher",
    "classify_line",
    "remove_device_checks",
    "replace_format_lines",
    "replace_mount_lines",
    "replace_unmount_lines",
    "rewrite_lines",
    "rewrite_script",
]
