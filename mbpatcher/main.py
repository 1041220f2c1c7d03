import argparse
from pathlib import Path

from mbpatcher.config import settings
from mbpatcher.config.registry import find_device, load_devices, load_patch_info
from mbpatcher.domain import Device, FileInfo, PatchInfo
from mbpatcher.logging import LoggerFactory, setup_logging
from mbpatcher.patcher import StandardPatcher
from mbpatcher.patcher.exceptions import ConfigurationError, FileWriteError, PatcherError


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mbpatcher",
        description="Make an updater-script multiboot compatible",
    )
    parser.add_argument(
        "target",
        nargs="?",
        help="Extracted ROM directory, or a single updater-script file",
    )
    parser.add_argument("--device", help="Device codename from the devices file")
    parser.add_argument("--devices-file", help="JSON device registry")
    parser.add_argument("--patchinfo-file", help="JSON patch info for the ROM")
    parser.add_argument("--system", default="", help="Raw system partition path")
    parser.add_argument("--cache", default="", help="Raw cache partition path")
    parser.add_argument("--data", default="", help="Raw data partition path")
    parser.add_argument(
        "--filename",
        help="ROM filename used for patch info lookup (defaults to the target name)",
    )
    parser.add_argument(
        "--remove-device-checks",
        action="store_true",
        help="Always disable ro.product.device/ro.build.product assertions",
    )
    parser.add_argument(
        "--save-defaults",
        action="store_true",
        help="Store --device, --devices-file, --patchinfo-file, --log-dir and "
        "--debug in the settings file",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable verbose debug output")
    parser.add_argument("--trace", action="store_true", help="Log every rewritten line")
    parser.add_argument("--log-dir", help="Directory for log files")
    return parser


def resolve_device(args) -> Device:
    """Pick the target device from the registry or from partition options.

    Raises:
        ConfigurationError: If a codename has no devices file to look it up
            in, or --devices-file is given without a codename
        DeviceNotFoundError: If the codename is not in the devices file
    """
    codename = args.device or settings.get_setting("default_device")
    devices_file = args.devices_file or settings.get_path("devices_file")
    if codename and not devices_file:
        raise ConfigurationError(f"Device {codename} given without a devices file")
    if args.devices_file and not codename:
        raise ConfigurationError(f"--devices-file {args.devices_file} given without --device")
    if codename:
        return find_device(load_devices(devices_file), codename)
    partitions = {"system": args.system, "cache": args.cache, "data": args.data}
    return Device(codename="custom", partitions=partitions)


def resolve_patch_info(args) -> PatchInfo:
    if args.remove_device_checks:
        return PatchInfo(device_checks={"default": False})
    patchinfo_file = args.patchinfo_file or settings.get_path("patchinfo_file")
    if patchinfo_file:
        return load_patch_info(patchinfo_file)
    return PatchInfo()


def save_defaults(args) -> None:
    """Persist the registry, patch info and logging options that were given."""
    log = LoggerFactory.for_config()
    values = {
        "devices_file": args.devices_file,
        "patchinfo_file": args.patchinfo_file,
        "default_device": args.device,
        "log_dir": args.log_dir,
        "debug": True if args.debug else None,
    }
    try:
        settings.update_settings(values)
    except OSError as error:
        raise FileWriteError(settings.SETTINGS_PATH, str(error)) from error
    log.info(f"Saved defaults to {settings.SETTINGS_PATH}")


def run(args) -> int:
    log = LoggerFactory.for_system()
    if args.save_defaults:
        save_defaults(args)
        if not args.target:
            return 0

    target = Path(args.target)
    device = resolve_device(args)
    info = FileInfo(
        filename=args.filename or target.name,
        device=device,
        patch_info=resolve_patch_info(args),
    )
    patcher = StandardPatcher(info)
    log.debug(f"Patching {target} for {device.codename} with {patcher.id()}")

    if target.is_dir():
        patcher.patch_files(target)
    else:
        patcher.patch_file(target)
    log.info(f"Patched {target}")
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.target and not args.save_defaults:
        parser.error("a target is required unless --save-defaults is given")
    settings.load_settings()
    debug_enabled = args.debug or settings.get_bool("debug")
    log_dir = Path(args.log_dir) if args.log_dir else settings.get_path("log_dir")
    setup_logging(debug=debug_enabled, trace=args.trace, log_dir=log_dir)
    log = LoggerFactory.for_system()

    try:
        return run(args)
    except PatcherError as error:
        log.error(str(error))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
