#!/usr/bin/env python3
"""CLI for the safe-store device filesystem."""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from safe_store import query, syslog, tree
from safe_store.config import StoreConfig, config_from_env, load_config
from safe_store.device import Device
from safe_store.errors import ConfigError, StoreError
from safe_store.log_setup import configure_logging
from safe_store.locator import parse
from safe_store.safe_io import copy_file, write_atomically

logger = logging.getLogger("safe_store.cli")


def parse_syslog_spec(value: str) -> tuple[str, int]:
    """Split a ``NAME:GUID`` event log option; GUID may be decimal or 0x-hex."""
    name, sep, guid = value.rpartition(":")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME:GUID, got {value!r}")
    try:
        return name, int(guid, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"GUID must be an integer, got {guid!r}")


def format_size(size: int) -> str:
    """Human-readable byte count; -1 means the volume is not accessible."""
    if size < 0:
        return "unknown"
    if size < 1024:
        return f"{size} B"
    for unit in ("KB", "MB"):
        size /= 1024
        if size < 1024:
            return f"{size:.1f} {unit}"
    return f"{size / 1024:.1f} GB"


def cmd_write(device: Device, args: argparse.Namespace) -> None:
    if args.text is not None:
        written = write_atomically(device, args.target, args.text)
    elif args.source is not None:
        with open(args.source, "rb") as f:
            written = write_atomically(
                device, args.target, f, expected_size=args.source.stat().st_size
            )
    else:
        written = write_atomically(device, args.target, sys.stdin.buffer)
    print(f"Wrote {written} bytes to {args.target}")


def cmd_copy(device: Device, args: argparse.Namespace) -> None:
    copied = copy_file(device, args.source, args.destination)
    print(f"Copied {copied} bytes to {args.destination}")


def cmd_mkdir(device: Device, args: argparse.Namespace) -> None:
    if args.parents:
        tree.create_directory_with_ancestors(device, args.target)
    else:
        tree.create_directory(device, args.target)


def cmd_rm(device: Device, args: argparse.Namespace) -> None:
    if args.recursive:
        tree.delete_tree(device, args.target)
    else:
        tree.delete(device, args.target)


def cmd_mv(device: Device, args: argparse.Namespace) -> None:
    tree.rename(device, args.target, args.new_name)


def cmd_ls(device: Device, args: argparse.Namespace) -> None:
    for name in tree.list_directory(device, args.target):
        print(name)


def cmd_info(device: Device, args: argparse.Namespace) -> None:
    loc = parse(args.target)
    root = f"file:///{loc.root}/"
    present = query.exists(device, loc)
    print(f"Locator:    {loc}")
    print(f"Exists:     {'yes' if present else 'no'}")
    if present:
        if query.is_directory(device, loc):
            print(f"Type:       directory ({format_size(query.directory_size(device, loc))})")
        else:
            print(f"Type:       file ({format_size(query.file_size(device, loc))})")
    print(f"Free:       {format_size(query.available_space(device, root))}")
    print(f"Used:       {format_size(query.used_space(device, root))}")
    print(f"Total:      {format_size(query.total_space(device, root))}")


def cmd_encryption(device: Device, args: argparse.Namespace) -> None:
    enabled = query.is_encryption_enabled(device, args.root)
    print(f"Encryption on {args.root}: {'enabled' if enabled else 'disabled'}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Crash-safe file operations on a device filesystem.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Locators look like file:///SDCard/path/to/file or file:///store/home/user/dir/
Roots are mounted from the YAML file named by --config or SAFE_STORE_CONFIG,
or from SAFE_STORE_SDCARD / SAFE_STORE_DEVICE_MEMORY.

Examples:
  python main.py write file:///SDCard/cfg.json --text '{"a": 2}'
  python main.py mkdir -p file:///SDCard/app/cache/
  python main.py rm -r file:///SDCard/app/
  python main.py encryption file:///SDCard/
        """,
    )
    parser.add_argument("--config", "-c", type=Path, help="YAML config file with root mounts")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--syslog",
        type=parse_syslog_spec,
        metavar="NAME:GUID",
        help="Register the system event log and mirror diagnostics into it",
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p = sub.add_parser("write", help="Atomically replace or create a file")
    p.add_argument("target")
    source = p.add_mutually_exclusive_group()
    source.add_argument("--text", help="Content to write (UTF-8)")
    source.add_argument("--from", dest="source", type=Path, help="Host file to read content from")
    p.set_defaults(func=cmd_write)

    p = sub.add_parser("copy", help="Atomically copy one device file onto another")
    p.add_argument("source")
    p.add_argument("destination")
    p.set_defaults(func=cmd_copy)

    p = sub.add_parser("mkdir", help="Create a directory")
    p.add_argument("target")
    p.add_argument("--parents", "-p", action="store_true", help="Create missing ancestors")
    p.set_defaults(func=cmd_mkdir)

    p = sub.add_parser("rm", help="Delete a file or directory")
    p.add_argument("target")
    p.add_argument("--recursive", "-r", action="store_true", help="Delete the whole tree")
    p.set_defaults(func=cmd_rm)

    p = sub.add_parser("mv", help="Rename a file or directory in place")
    p.add_argument("target")
    p.add_argument("new_name")
    p.set_defaults(func=cmd_mv)

    p = sub.add_parser("ls", help="List a directory")
    p.add_argument("target")
    p.set_defaults(func=cmd_ls)

    p = sub.add_parser("info", help="Show size and free space")
    p.add_argument("target")
    p.set_defaults(func=cmd_info)

    p = sub.add_parser("encryption", help="Detect whether new files get encrypted")
    p.add_argument("root", nargs="?", default="file:///SDCard/")
    p.set_defaults(func=cmd_encryption)

    return parser


def load_store_config(config_path: Path | None) -> StoreConfig:
    if config_path is not None:
        return load_config(config_path)
    return config_from_env()


def main(argv: list[str] | None = None) -> None:
    # Load environment variables from .env file
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(2)

    try:
        config = load_store_config(args.config)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        sys.exit(2)

    device = Device(config)

    if args.syslog is not None:
        name, guid = args.syslog
        if not syslog.setup(name, guid):
            print(f"Warning: could not register event log {name!r}", file=sys.stderr)

    # Configure logging (after parsing so --verbose is available)
    configure_logging(device, verbose=args.verbose)

    try:
        args.func(device, args)
    except StoreError as e:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
    except OSError as e:
        # Host-side failures (e.g. reading --from)
        print(f"File error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
