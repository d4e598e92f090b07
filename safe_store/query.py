"""Read-only probes: existence, sizes, free space and encryption mode.

Size and space queries return ``-1`` when the volume is not accessible
instead of raising; ``-1`` is never a legitimate size.
"""

import logging

from .device import AccessMode, Device
from .errors import FilesystemUnavailableError, StoreError
from .locator import DEVICE_MEMORY_ROOT, SDCARD_ROOT, Locator, join, parse
from .streams import safely_close_connection

logger = logging.getLogger(__name__)

UNKNOWN_SIZE = -1


def _probe(device: Device, locator: "str | Locator", attribute: str, *args: object) -> object:
    conn = None
    try:
        conn = device.open(locator, AccessMode.READ)
        return getattr(conn, attribute)(*args)
    finally:
        safely_close_connection(conn)


def _size_probe(device: Device, locator: "str | Locator", attribute: str, *args: object) -> int:
    try:
        return _probe(device, locator, attribute, *args)
    except FilesystemUnavailableError as exc:
        logger.debug("%s unavailable for %s: %s", attribute, locator, exc)
        return UNKNOWN_SIZE


def exists(device: Device, locator: "str | Locator") -> bool:
    return _probe(device, locator, "exists")


def is_directory(device: Device, locator: "str | Locator") -> bool:
    return _probe(device, locator, "is_directory")


def file_size(device: Device, locator: "str | Locator") -> int:
    """Size of a file in bytes, or -1 if its volume is not accessible.

    Raises:
        NotFoundError: If the file does not exist.
    """
    return _size_probe(device, locator, "file_size")


def directory_size(device: Device, locator: "str | Locator", include_subdirs: bool = False) -> int:
    """Total size of the files in a directory, or -1 if its volume is not accessible."""
    return _size_probe(device, parse(locator).as_directory(), "directory_size", include_subdirs)


def available_space(device: Device, root: "str | Locator") -> int:
    return _size_probe(device, root, "available_size")


def total_space(device: Device, root: "str | Locator") -> int:
    return _size_probe(device, root, "total_size")


def used_space(device: Device, root: "str | Locator") -> int:
    return _size_probe(device, root, "used_size")


def _is_accessible(device: Device, root: str) -> bool:
    try:
        return is_directory(device, root)
    except StoreError as exc:
        logger.debug("%s is not accessible: %s", root, exc)
        return False


def is_sdcard_accessible(device: Device) -> bool:
    """True if the removable card root is mounted. Never raises."""
    return _is_accessible(device, SDCARD_ROOT)


def is_device_memory_accessible(device: Device) -> bool:
    """True if the device memory root is mounted. Never raises."""
    return _is_accessible(device, DEVICE_MEMORY_ROOT)


def is_encryption_enabled(device: Device, root: "str | Locator" = SDCARD_ROOT) -> bool:
    """Detect whether the platform encrypts new files under ``root``.

    Creates a throwaway probe file and checks whether the name it was
    stored under carries the encryption suffix. The probe is removed
    afterwards; failures removing it are logged, not raised.
    """
    probe = join(root, device.config.probe_name)
    suffix = device.config.encryption_suffix

    conn = None
    try:
        conn = device.open(probe, AccessMode.READ_WRITE)
        if conn.exists():
            conn.delete()
        conn.create()
        encrypted = conn.name.endswith(suffix)
        try:
            conn.delete()
        except StoreError as exc:
            logger.warning("Could not remove encryption probe %s: %s", probe, exc)
        return encrypted
    finally:
        safely_close_connection(conn)
