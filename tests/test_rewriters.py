"""Tests for patcher/rewriters.py - the line rewriting passes.

Covers:
- Mount, unmount and format line replacement
- Explicit-path format rules (delete_recursive, format.sh)
- Device check removal and its idempotence
- The full pipeline over script text
"""

import pytest

from mbpatcher.patcher.rewriters import (
    DEFAULT_TEMPLATES,
    ScriptTemplates,
    remove_device_checks,
    replace_format_lines,
    replace_mount_lines,
    replace_unmount_lines,
    rewrite_lines,
    rewrite_script,
)


MOUNT_SYSTEM = 'run_program("/update-binary-tool", "mount", "/system");'
MOUNT_CACHE = 'run_program("/update-binary-tool", "mount", "/cache");'
MOUNT_DATA = 'run_program("/update-binary-tool", "mount", "/data");'
UNMOUNT_SYSTEM = 'run_program("/update-binary-tool", "unmount", "/system");'
UNMOUNT_CACHE = 'run_program("/update-binary-tool", "unmount", "/cache");'
UNMOUNT_DATA = 'run_program("/update-binary-tool", "unmount", "/data");'
FORMAT_SYSTEM = 'run_program("/update-binary-tool", "format", "/system");'
FORMAT_CACHE = 'run_program("/update-binary-tool", "format", "/cache");'
FORMAT_DATA = 'run_program("/update-binary-tool", "format", "/data");'

DEVICE_ASSERT = (
    'assert(getprop("ro.product.device") == "d2att" || '
    'getprop("ro.build.product") == "d2att");'
)
STRIPPED_ASSERT = (
    'assert("true" == "true" || getprop("ro.product.device") == "d2att" || '
    'getprop("ro.build.product") == "d2att");'
)


class TestReplaceMountLines:
    """Tests for replace_mount_lines()."""

    @pytest.mark.parametrize(
        "line, expected",
        [
            ('mount("ext4", "/dev/block/mmcblk0p1", "/system");', MOUNT_SYSTEM),
            ('mount("ext4", "EMMC", "/dev/block/mmcblk0p18", "/cache");', MOUNT_CACHE),
            ('mount("ext4", "EMMC", "/dev/block/mmcblk0p15", "/data");', MOUNT_DATA),
            ('    mount ("ext4", "EMMC", "/dev/block/mmcblk0p1", "/system");', MOUNT_SYSTEM),
            ('run_program("/sbin/busybox", "mount", "/cache");', MOUNT_CACHE),
            ('run_program("/sbin/mount", "-t", "auto", "/data");', MOUNT_DATA),
        ],
    )
    def test_mount_lines_replaced(self, line, expected):
        assert replace_mount_lines([line]) == [expected]

    def test_device_path_mount(self, mapped_device):
        line = 'mount("ext4", "EMMC", "/dev/block/mmcblk0p14", "/mnt/target");'
        assert replace_mount_lines([line], mapped_device) == [MOUNT_SYSTEM]

    def test_device_path_needs_device(self):
        line = 'mount("ext4", "EMMC", "/dev/block/mmcblk0p14", "/mnt/target");'
        assert replace_mount_lines([line]) == [line]

    def test_unclassified_mount_unchanged(self):
        line = 'mount("vfat", "EMMC", "/dev/block/mmcblk0p1", "/firmware");'
        assert replace_mount_lines([line]) == [line]

    @pytest.mark.parametrize(
        "line",
        [
            'ui_print("Mounting system...");',
            'ifelse(is_mounted("/system"), unmount("/system"));',
            'run_program("/sbin/remount", "/system");',
            'run_program("/sbin/busybox", "umount", "/system");',
            'unmount("/system");',
            'run_program("/a,b/mount", "/system");',
        ],
    )
    def test_non_mount_lines_unchanged(self, line):
        assert replace_mount_lines([line]) == [line]

    def test_system_before_data(self):
        line = 'mount("ext4", "EMMC", "/dev/block/platform/system", "/data");'
        assert replace_mount_lines([line]) == [MOUNT_SYSTEM]

    def test_line_count_and_positions_preserved(self):
        lines = [
            'ui_print("start");',
            'mount("ext4", "EMMC", "/dev/block/mmcblk0p1", "/system");',
            'ui_print("middle");',
            'mount("ext4", "EMMC", "/dev/block/mmcblk0p2", "/cache");',
            'ui_print("end");',
        ]
        result = replace_mount_lines(lines)
        assert result == [
            'ui_print("start");',
            MOUNT_SYSTEM,
            'ui_print("middle");',
            MOUNT_CACHE,
            'ui_print("end");',
        ]

    def test_input_not_mutated(self):
        lines = ['mount("ext4", "EMMC", "/dev/block/mmcblk0p1", "/system");']
        replace_mount_lines(lines)
        assert lines == ['mount("ext4", "EMMC", "/dev/block/mmcblk0p1", "/system");']


class TestReplaceUnmountLines:
    """Tests for replace_unmount_lines()."""

    @pytest.mark.parametrize(
        "line, expected",
        [
            ('unmount("/system");', UNMOUNT_SYSTEM),
            ('  unmount("/cache");', UNMOUNT_CACHE),
            ('unmount("/data");', UNMOUNT_DATA),
            ('run_program("/sbin/busybox", "umount", "/cache");', UNMOUNT_CACHE),
            ('run_program("/tmp/busybox", "umount", "/dev/block/mmcblk0p15");', None),
        ],
    )
    def test_unmount_lines(self, line, expected):
        assert replace_unmount_lines([line]) == [expected or line]

    def test_device_path_unmount(self, mapped_device):
        line = 'run_program("/tmp/busybox", "umount", "/dev/block/mmcblk0p15");'
        assert replace_unmount_lines([line], mapped_device) == [UNMOUNT_DATA]

    @pytest.mark.parametrize(
        "line",
        [
            'mount("ext4", "EMMC", "/dev/block/mmcblk0p1", "/system");',
            'run_program("/sbin/busybox", "mount", "/cache");',
            'unmount("/firmware");',
        ],
    )
    def test_non_unmount_lines_unchanged(self, line):
        assert replace_unmount_lines([line]) == [line]


class TestReplaceFormatLines:
    """Tests for replace_format_lines()."""

    @pytest.mark.parametrize(
        "line, expected",
        [
            ('format("ext4", "EMMC", "/dev/block/mmcblk0p14", "0", "/system");', FORMAT_SYSTEM),
            ('format("ext4", "EMMC", "/dev/block/mmcblk0p18", "0", "/cache");', FORMAT_CACHE),
            ('format("ext4", "EMMC", "/dev/block/platform/by-name/userdata", "0");', FORMAT_DATA),
        ],
    )
    def test_format_lines_classified(self, line, expected):
        assert replace_format_lines([line]) == [expected]

    def test_format_device_path(self, mapped_device):
        line = 'format("ext4", "EMMC", "/dev/block/mmcblk0p18", "0", "/mnt");'
        assert replace_format_lines([line], mapped_device) == [FORMAT_CACHE]

    def test_unclassified_format_unchanged(self):
        line = 'format("vfat", "EMMC", "/dev/block/mmcblk0p1", "0", "/firmware");'
        assert replace_format_lines([line]) == [line]

    def test_delete_recursive_system(self):
        assert replace_format_lines(['delete_recursive("/system");']) == [FORMAT_SYSTEM]

    def test_delete_recursive_cache(self):
        assert replace_format_lines(['delete_recursive("/cache");']) == [FORMAT_CACHE]

    def test_delete_recursive_with_other_arguments(self):
        line = 'delete_recursive("/data/dalvik-cache", "/system");'
        assert replace_format_lines([line]) == [FORMAT_SYSTEM]

    def test_delete_recursive_ignores_device_mapping(self, mapped_device):
        line = 'delete_recursive("/cache");'
        assert replace_format_lines([line], mapped_device) == [FORMAT_CACHE]

    @pytest.mark.parametrize(
        "line",
        [
            'delete_recursive("/system/app");',
            'delete_recursive("/data/app");',
            'delete_recursive("/data");',
            'delete("/system/build.prop");',
        ],
    )
    def test_other_deletes_unchanged(self, line):
        assert replace_format_lines([line]) == [line]

    def test_format_sh_formats_data(self):
        assert replace_format_lines(['run_program("/tmp/format.sh");']) == [FORMAT_DATA]

    def test_format_sh_ignores_arguments(self):
        line = 'run_program("/tmp/format.sh", "/system");'
        assert replace_format_lines([line]) == [FORMAT_DATA]

    def test_format_sh_must_be_exact_name(self):
        line = 'run_program("/tmp/reformat.sh", "/data");'
        assert replace_format_lines([line]) == [line]

    def test_mount_lines_unchanged(self):
        line = 'mount("ext4", "EMMC", "/dev/block/mmcblk0p1", "/system");'
        assert replace_format_lines([line]) == [line]


class TestRemoveDeviceChecks:
    """Tests for remove_device_checks()."""

    def test_device_assert_stripped(self):
        assert remove_device_checks([DEVICE_ASSERT]) == [STRIPPED_ASSERT]

    def test_build_product_assert_stripped(self):
        line = 'assert(getprop("ro.build.product") == "d2att");'
        expected = 'assert("true" == "true" || getprop("ro.build.product") == "d2att");'
        assert remove_device_checks([line]) == [expected]

    def test_whitespace_preserved(self):
        line = '  assert (getprop("ro.product.device") == "d2att");'
        expected = '  assert ("true" == "true" || getprop("ro.product.device") == "d2att");'
        assert remove_device_checks([line]) == [expected]

    @pytest.mark.parametrize(
        "line",
        [
            'assert(getprop("ro.bootloader") == "I747UCDLK3");',
            'assert(package_extract_file("boot.img", "/tmp/boot.img"));',
            'ui_print(getprop("ro.product.device"));',
        ],
    )
    def test_other_lines_unchanged(self, line):
        assert remove_device_checks([line]) == [line]

    def test_idempotent(self):
        once = remove_device_checks([DEVICE_ASSERT])
        assert remove_device_checks(once) == once


class TestTemplates:
    """Tests for ScriptTemplates."""

    def test_default_templates(self):
        assert DEFAULT_TEMPLATES.mount.format(path="/system") == MOUNT_SYSTEM
        assert DEFAULT_TEMPLATES.unmount.format(path="/cache") == UNMOUNT_CACHE
        assert DEFAULT_TEMPLATES.format.format(path="/data") == FORMAT_DATA

    def test_custom_templates(self):
        templates = ScriptTemplates(
            mount='mb_mount("{path}");',
            unmount='mb_unmount("{path}");',
            format='mb_format("{path}");',
        )
        lines = [
            'mount("ext4", "EMMC", "/dev/block/mmcblk0p1", "/system");',
            'unmount("/cache");',
            'delete_recursive("/cache");',
        ]
        assert rewrite_lines(lines, templates=templates) == [
            'mb_mount("/system");',
            'mb_unmount("/cache");',
            'mb_format("/cache");',
        ]


class TestRewriteScript:
    """Tests for the full pipeline."""

    def test_sample_script(self, sample_script, mapped_device):
        result = rewrite_script(sample_script, mapped_device).split("\n")
        original = sample_script.split("\n")

        assert len(result) == len(original)
        assert result[0] == original[0]
        assert result[1] == MOUNT_SYSTEM
        assert result[2] == original[2]
        assert result[3] == UNMOUNT_SYSTEM
        assert result[4] == FORMAT_SYSTEM
        assert result[5] == MOUNT_SYSTEM
        assert result[6:8] == original[6:8]
        assert result[8] == UNMOUNT_SYSTEM
        assert result[9] == ""

    def test_sample_script_removes_checks(self, sample_script, mapped_device):
        result = rewrite_script(sample_script, mapped_device, remove_checks=True)
        first = result.split("\n")[0]
        assert first.startswith('assert("true" == "true" || getprop("ro.product.device")')

    def test_checks_kept_by_default(self, mapped_device):
        assert rewrite_script(DEVICE_ASSERT, mapped_device) == DEVICE_ASSERT

    def test_untouched_script_round_trips(self, plain_script, mapped_device):
        assert rewrite_script(plain_script, mapped_device, remove_checks=True) == plain_script

    def test_empty_script(self):
        assert rewrite_script("") == ""

    def test_trailing_newline_kept(self):
        assert rewrite_script('unmount("/system");\n') == UNMOUNT_SYSTEM + "\n"

    def test_rewritten_lines_not_rewritten_again(self):
        lines = [MOUNT_SYSTEM, UNMOUNT_CACHE, FORMAT_DATA]
        assert rewrite_lines(lines, remove_checks=True) == lines
