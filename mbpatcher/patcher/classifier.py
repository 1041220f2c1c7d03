"""Partition classification for updater-script lines.

A line is matched against the logical partition names and the device's raw
partition paths by plain substring containment. Checks run in the order
system, cache, data and the first hit wins, so a line mentioning both
``/system`` and ``/data`` is a system line.
"""

from __future__ import annotations

from mbpatcher.domain import Device, Partition


# Extra literals that identify a partition besides its own name
_ALIASES: dict[Partition, tuple[str, ...]] = {
    Partition.SYSTEM: (),
    Partition.CACHE: (),
    Partition.DATA: ("userdata",),
}


def _matches(line: str, partition: Partition, raw_path: str) -> bool:
    if partition.value in line:
        return True
    if any(alias in line for alias in _ALIASES[partition]):
        return True
    return bool(raw_path) and raw_path in line


def classify_line(line: str, device: Device | None = None) -> Partition | None:
    """Return the partition a line refers to, or None.

    Args:
        line: A single updater-script line
        device: Target device; its non-empty partition paths also count as matches

    Returns:
        Partition.SYSTEM, Partition.CACHE, Partition.DATA, or None
    """
    for partition in Partition:
        raw_path = device.partition(partition.value) if device else ""
        if _matches(line, partition, raw_path):
            return partition
    return None
