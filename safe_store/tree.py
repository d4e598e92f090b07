"""Directory tree operations: create with ancestors, delete recursively.

``delete`` is the strict, non-recursive primitive that refuses populated
directories; ``delete_tree`` removes a whole tree. Both are kept so callers
can choose between "must be empty" and "remove everything".
"""

import logging

from .device import AccessMode, Device
from .locator import PATH_SEPARATOR, Locator, ancestors_of, parse, strip_encryption_suffix
from .streams import safely_close_connection

logger = logging.getLogger(__name__)


def delete(device: Device, locator: "str | Locator") -> None:
    """Delete a file or an empty directory. Does nothing if it does not exist.

    Raises:
        DirectoryNotEmptyError: If the target is a populated directory.
    """
    conn = None
    try:
        conn = device.open(locator, AccessMode.READ_WRITE)
        if conn.exists():
            conn.delete()
    finally:
        safely_close_connection(conn)


def rename(device: Device, locator: "str | Locator", new_name: str) -> None:
    """Rename a file or directory within its directory. Does nothing if it does not exist.

    Raises:
        AlreadyExistsError: If an entry named ``new_name`` already exists.
        InvalidLocatorError: If ``new_name`` contains a path.
    """
    conn = None
    try:
        conn = device.open(locator, AccessMode.READ_WRITE)
        if conn.exists():
            conn.rename(new_name)
    finally:
        safely_close_connection(conn)


def create_directory(device: Device, locator: "str | Locator") -> None:
    """Create one directory level. Does nothing if the target exists.

    Raises:
        MissingParentError: If the parent directory does not exist.
    """
    conn = None
    try:
        conn = device.open(parse(locator).as_directory(), AccessMode.READ_WRITE)
        if not conn.exists():
            conn.mkdir()
    finally:
        safely_close_connection(conn)


def create_directory_with_ancestors(device: Device, locator: "str | Locator") -> None:
    """Create a directory and every missing ancestor, top-down."""
    for ancestor in ancestors_of(parse(locator).as_directory()):
        create_directory(device, ancestor)


def list_directory(device: Device, locator: "str | Locator") -> list[str]:
    """Logical names of a directory's entries, encryption suffix stripped.

    Directories keep their trailing ``/``.
    """
    suffix = device.config.encryption_suffix
    conn = None
    try:
        conn = device.open(parse(locator).as_directory(), AccessMode.READ)
        names = conn.list()
    finally:
        safely_close_connection(conn)
    return [
        name if name.endswith(PATH_SEPARATOR) else strip_encryption_suffix(name, suffix)
        for name in names
    ]


def delete_tree(device: Device, locator: "str | Locator") -> None:
    """Delete a file, or a directory with everything below it.

    Does nothing if the target does not exist. The directory listing is
    taken and its handle released before any child is deleted.
    """
    loc = parse(locator)
    conn = None
    children: list[Locator] = []
    try:
        conn = device.open(loc, AccessMode.READ_WRITE)
        if not conn.exists():
            return
        if not conn.is_directory():
            conn.delete()
            return
        for name in conn.list():
            is_dir = name.endswith(PATH_SEPARATOR)
            logical = name.rstrip(PATH_SEPARATOR) if is_dir else strip_encryption_suffix(
                name, device.config.encryption_suffix
            )
            children.append(loc.as_directory().child(logical, directory=is_dir))
    finally:
        safely_close_connection(conn)

    for child in children:
        delete_tree(device, child)

    if loc.is_root:
        # Roots are mount points; only their contents go
        return
    logger.debug("Deleting emptied directory %s", loc)
    delete(device, loc)
