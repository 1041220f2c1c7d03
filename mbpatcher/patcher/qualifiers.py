"""Line qualifier tables for the rewriting passes.

Each pass owns an ordered tuple of LineQualifier records. A qualifier is a
compiled pattern searched anywhere in the line; anchored patterns use ``^``
and tolerate leading whitespace.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class LineQualifier:
    name: str
    pattern: re.Pattern

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None


def _qualifier(name: str, pattern: str) -> LineQualifier:
    return LineQualifier(name=name, pattern=re.compile(pattern))


def first_match(
    qualifiers: Iterable[LineQualifier], line: str
) -> LineQualifier | None:
    """Return the first qualifier matching the line, or None."""
    for qualifier in qualifiers:
        if qualifier.matches(line):
            return qualifier
    return None


MOUNT_QUALIFIERS: tuple[LineQualifier, ...] = (
    _qualifier("mount", r"^\s*mount\s*\(.*$"),
    _qualifier(
        "busybox_mount",
        r'^\s*run_program\s*\(\s*"[^"]*busybox"\s*,\s*"mount".*$',
    ),
    _qualifier("mount_binary", r'^\s*run_program\s*\(\s*"[^",]*/mount".*$'),
)

UNMOUNT_QUALIFIERS: tuple[LineQualifier, ...] = (
    _qualifier("unmount", r"^\s*unmount\s*\(.*$"),
    _qualifier(
        "busybox_umount",
        r'^\s*run_program\s*\(\s*"[^"]*busybox"\s*,\s*"umount".*$',
    ),
)

# Format actions, in priority order. Only "format" needs classification;
# the others name their partition explicitly.
FORMAT_QUALIFIERS: tuple[LineQualifier, ...] = (
    _qualifier("format", r"^\s*format\s*\(.*$"),
    _qualifier("delete_system", r'delete_recursive\s*\([^\)]*"/system"'),
    _qualifier("delete_cache", r'delete_recursive\s*\([^\)]*"/cache"'),
    _qualifier("format_sh", r'^\s*run_program\s*\(\s*"[^",]*/format\.sh".*$'),
)

DEVICE_CHECK_QUALIFIERS: tuple[LineQualifier, ...] = (
    _qualifier(
        "device_check",
        r"^\s*assert\s*\(.*getprop\s*\(.*(ro\.product\.device|ro\.build\.product)",
    ),
)

ASSERT_OPEN = re.compile(r"^(\s*assert\s*\()")
