"""Standard updater-script patcher.

Makes a ROM's ``META-INF/com/google/android/updater-script`` multiboot
compatible: mounts, unmounts and formats of /system, /cache and /data go
through the multiboot helper, and the device model assertions are disabled
when the ROM's patch info asks for it.

Example:
    >>> from mbpatcher.domain import Device, FileInfo
    >>> info = FileInfo("rom.zip", Device("hammerhead"))
    >>> patcher = StandardPatcher(info)
    >>> patcher.patch_contents(b'mount("ext4", "EMMC", "/dev/x", "/system");')
    b'run_program("/update-binary-tool", "mount", "/system");'
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from mbpatcher.domain import FileInfo
from mbpatcher.logging import operation_context
from mbpatcher.patcher.exceptions import PatcherError
from mbpatcher.patcher.fileutils import read_to_memory, write_from_memory
from mbpatcher.patcher.rewriters import DEFAULT_TEMPLATES, ScriptTemplates, rewrite_script


# Bytes that are not valid UTF-8 survive the round trip unchanged
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"


class StandardPatcher:
    """Rewrites the updater-script of an extracted ROM."""

    ID = "StandardPatcher"
    UPDATER_SCRIPT = "META-INF/com/google/android/updater-script"

    def __init__(
        self,
        info: FileInfo,
        templates: ScriptTemplates = DEFAULT_TEMPLATES,
    ):
        self.info = info
        self.templates = templates

    def error(self) -> PatcherError | None:
        """Rewriting has no failure state of its own; always None."""
        return None

    def id(self) -> str:
        return self.ID

    def new_files(self) -> list[str]:
        return []

    def existing_files(self) -> list[str]:
        return [self.UPDATER_SCRIPT]

    def patch_contents(self, contents: bytes, remove_checks: bool | None = None) -> bytes:
        """Rewrite updater-script contents in memory.

        ``remove_checks`` defaults to the decision derived from the file info.
        """
        if remove_checks is None:
            remove_checks = self.info.remove_device_checks()
        text = contents.decode(ENCODING, ENCODING_ERRORS)
        patched = rewrite_script(
            text,
            self.info.device,
            remove_checks=remove_checks,
            templates=self.templates,
        )
        return patched.encode(ENCODING, ENCODING_ERRORS)

    def patch_files(
        self, directory: str | Path, boot_images: Sequence[str] = ()
    ) -> bool:
        """Patch the updater-script inside an extracted ROM directory.

        Args:
            directory: Root of the extracted ROM
            boot_images: Unused; accepted for patcher interface compatibility

        Returns:
            True once the script has been rewritten

        Raises:
            FileReadError: If the updater-script is missing or unreadable
            FileWriteError: If the patched script cannot be written back
        """
        return self.patch_file(Path(directory) / self.UPDATER_SCRIPT)

    def patch_file(self, path: str | Path) -> bool:
        """Patch a single updater-script file in place."""
        with operation_context(
            "patch",
            patcher=self.ID,
            filename=self.info.filename,
            device=self.info.device.codename,
        ) as log:
            contents = read_to_memory(path)
            remove_checks = self.info.remove_device_checks()
            if remove_checks:
                log.info("Device checks will be removed")
            write_from_memory(path, self.patch_contents(contents, remove_checks))
        return True
