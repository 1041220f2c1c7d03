"""
Pytest configuration and shared fixtures for mbpatcher tests.

This module provides common fixtures and utilities used across all test modules.
"""

from pathlib import Path

import pytest

from mbpatcher.domain import Device, FileInfo, PatchInfo
from mbpatcher.logging import logger


UPDATER_SCRIPT = "META-INF/com/google/android/updater-script"


# ==============================================================================
# Device Fixtures
# ==============================================================================


@pytest.fixture
def generic_device() -> Device:
    """Device with no partition paths defined."""
    return Device(codename="generic")


@pytest.fixture
def mapped_device() -> Device:
    """
    Device whose raw partition paths do not contain the logical names.

    Lines mentioning only these block paths can only be classified through
    the device mapping.
    """
    return Device(
        codename="d2att",
        name="Samsung Galaxy S III (AT&T)",
        partitions={
            "system": "/dev/block/mmcblk0p14",
            "cache": "/dev/block/mmcblk0p18",
            "data": "/dev/block/mmcblk0p15",
        },
    )


# ==============================================================================
# Script Fixtures
# ==============================================================================


@pytest.fixture
def sample_script() -> str:
    """A typical CyanogenMod style updater-script."""
    return "\n".join(
        [
            'assert(getprop("ro.product.device") == "d2att" || '
            'getprop("ro.build.product") == "d2att" || '
            'abort("This package is for device: d2att; this device is " + '
            'getprop("ro.product.device") + "."););',
            'mount("ext4", "EMMC", "/dev/block/mmcblk0p14", "/system");',
            'package_extract_file("system/bin/backuptool.sh", "/tmp/backuptool.sh");',
            'unmount("/system");',
            'format("ext4", "EMMC", "/dev/block/mmcblk0p14", "0", "/system");',
            'mount("ext4", "EMMC", "/dev/block/mmcblk0p14", "/system");',
            'package_extract_dir("system", "/system");',
            'set_perm_recursive(0, 0, 0755, 0644, "/system");',
            'unmount("/system");',
            "",
        ]
    )


@pytest.fixture
def plain_script() -> str:
    """A script with no lines any pass rewrites."""
    return "\n".join(
        [
            'ui_print("Installing kernel");',
            'package_extract_file("boot.img", "/dev/block/mmcblk0p7");',
            "show_progress(0.100000, 0);",
            "",
        ]
    )


@pytest.fixture
def rom_dir(tmp_path: Path, sample_script: str) -> Path:
    """Extracted ROM directory containing the sample updater-script."""
    script = tmp_path / "rom" / UPDATER_SCRIPT
    script.parent.mkdir(parents=True)
    script.write_text(sample_script, encoding="utf-8")
    return tmp_path / "rom"


@pytest.fixture
def file_info(mapped_device: Device) -> FileInfo:
    """FileInfo that keeps device checks (default patch info)."""
    return FileInfo(filename="cm-11-d2att.zip", device=mapped_device)


@pytest.fixture
def strip_checks_info(mapped_device: Device) -> FileInfo:
    """FileInfo whose patch info disables device checks for cm- ROMs."""
    return FileInfo(
        filename="cm-11-d2att.zip",
        device=mapped_device,
        patch_info=PatchInfo(
            name="CyanogenMod",
            matches=(r"^cm-.*\.zip$",),
            device_checks={r"^cm-.*\.zip$": False},
        ),
    )


# ==============================================================================
# Logging Fixtures
# ==============================================================================


@pytest.fixture
def log_records():
    """Capture loguru records emitted during a test."""
    records: list[dict] = []
    logger.remove()
    handler_id = logger.add(lambda message: records.append(message.record), level="TRACE")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def reset_logger():
    """Drop any sinks added by setup_logging() once the test is done."""
    yield
    logger.remove()
