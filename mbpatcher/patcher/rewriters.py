"""Line rewriting passes for updater-scripts.

Each pass takes a list of lines and returns a new list of the same length.
Lines that qualify for a pass are replaced in place by a call to the
multiboot helper (``/update-binary-tool``); every other line is returned
unchanged.

Passes:
    - replace_mount_lines(): mount(...), busybox mount, .../mount
    - replace_unmount_lines(): unmount(...), busybox umount
    - replace_format_lines(): format(...), delete_recursive of /system or
      /cache, .../format.sh
    - remove_device_checks(): neutralize ro.product.device and
      ro.build.product assertions
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from mbpatcher.domain import Device, Partition
from mbpatcher.logging import LoggerFactory
from mbpatcher.patcher.classifier import classify_line
from mbpatcher.patcher.qualifiers import (
    ASSERT_OPEN,
    DEVICE_CHECK_QUALIFIERS,
    FORMAT_QUALIFIERS,
    MOUNT_QUALIFIERS,
    UNMOUNT_QUALIFIERS,
    LineQualifier,
    first_match,
)


log = LoggerFactory.for_patcher(job_id="-")
line_log = LoggerFactory.for_lines()

HELPER_BINARY = "/update-binary-tool"
DEVICE_CHECK_BYPASS = '"true" == "true" || '


@dataclass(frozen=True)
class ScriptTemplates:
    """Replacement line per operation kind, with a single {path} placeholder."""

    mount: str
    unmount: str
    format: str


DEFAULT_TEMPLATES = ScriptTemplates(
    mount=f'run_program("{HELPER_BINARY}", "mount", "{{path}}");',
    unmount=f'run_program("{HELPER_BINARY}", "unmount", "{{path}}");',
    format=f'run_program("{HELPER_BINARY}", "format", "{{path}}");',
)

# Explicit partition for the format actions that do not need classification
_FORMAT_TARGETS: dict[str, Partition] = {
    "delete_system": Partition.SYSTEM,
    "delete_cache": Partition.CACHE,
    "format_sh": Partition.DATA,
}

# Returns the replacement for a qualifying line, or None to keep it
Replacer = Callable[[str, LineQualifier], "str | None"]


def _rewrite(
    lines: Sequence[str],
    qualifiers: Sequence[LineQualifier],
    replacer: Replacer,
    label: str,
) -> list[str]:
    result: list[str] = []
    changed = 0
    for line in lines:
        qualifier = first_match(qualifiers, line)
        replacement = replacer(line, qualifier) if qualifier else None
        if replacement is None:
            result.append(line)
            continue
        line_log.trace("{} [{}]: {!r} -> {!r}", label, qualifier.name, line, replacement)
        result.append(replacement)
        changed += 1
    log.debug("{}: rewrote {} of {} lines", label, changed, len(lines))
    return result


def _classified(template: str, device: Device | None) -> Replacer:
    def replace(line: str, _qualifier: LineQualifier) -> str | None:
        partition = classify_line(line, device)
        if partition is None:
            return None
        return template.format(path=partition.mount_point)

    return replace


def replace_mount_lines(
    lines: Sequence[str],
    device: Device | None = None,
    templates: ScriptTemplates = DEFAULT_TEMPLATES,
) -> list[str]:
    """Redirect partition mounts to the multiboot helper.

    Args:
        lines: updater-script lines
        device: Target device, used for its raw partition paths
        templates: Replacement templates

    Returns:
        New list of lines, same length as the input
    """
    return _rewrite(
        lines, MOUNT_QUALIFIERS, _classified(templates.mount, device), "mount"
    )


def replace_unmount_lines(
    lines: Sequence[str],
    device: Device | None = None,
    templates: ScriptTemplates = DEFAULT_TEMPLATES,
) -> list[str]:
    """Redirect partition unmounts to the multiboot helper."""
    return _rewrite(
        lines, UNMOUNT_QUALIFIERS, _classified(templates.unmount, device), "unmount"
    )


def replace_format_lines(
    lines: Sequence[str],
    device: Device | None = None,
    templates: ScriptTemplates = DEFAULT_TEMPLATES,
) -> list[str]:
    """Redirect partition formats to the multiboot helper.

    ``format(...)`` lines are classified like mounts. Recursive deletes of
    ``/system`` or ``/cache`` and any ``.../format.sh`` program (which wipes
    /data by convention) are replaced regardless of the device.
    """
    classified = _classified(templates.format, device)

    def replace(line: str, qualifier: LineQualifier) -> str | None:
        target = _FORMAT_TARGETS.get(qualifier.name)
        if target is None:
            return classified(line, qualifier)
        return templates.format.format(path=target.mount_point)

    return _rewrite(lines, FORMAT_QUALIFIERS, replace, "format")


def remove_device_checks(lines: Sequence[str]) -> list[str]:
    """Disable device model/name assertions.

    ``assert(getprop("ro.product.device") == "x" || ...);`` becomes
    ``assert("true" == "true" || getprop("ro.product.device") == "x" || ...);``.
    Lines that already carry the bypass are left as they are.
    """

    def replace(line: str, _qualifier: LineQualifier) -> str | None:
        match = ASSERT_OPEN.match(line)
        if line[match.end():].startswith(DEVICE_CHECK_BYPASS):
            return None
        return line[: match.end()] + DEVICE_CHECK_BYPASS + line[match.end():]

    return _rewrite(lines, DEVICE_CHECK_QUALIFIERS, replace, "device check")


def rewrite_lines(
    lines: Sequence[str],
    device: Device | None = None,
    *,
    remove_checks: bool = False,
    templates: ScriptTemplates = DEFAULT_TEMPLATES,
) -> list[str]:
    """Run all passes in order: mount, unmount, format, device checks."""
    lines = replace_mount_lines(lines, device, templates)
    lines = replace_unmount_lines(lines, device, templates)
    lines = replace_format_lines(lines, device, templates)
    if remove_checks:
        lines = remove_device_checks(lines)
    return lines


def rewrite_script(
    text: str,
    device: Device | None = None,
    *,
    remove_checks: bool = False,
    templates: ScriptTemplates = DEFAULT_TEMPLATES,
) -> str:
    """Rewrite updater-script text. Lines are split and rejoined on "\\n"."""
    lines = rewrite_lines(
        text.split("\n"), device, remove_checks=remove_checks, templates=templates
    )
    return "\n".join(lines)
