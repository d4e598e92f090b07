"""Device filesystem connector backed by host directories.

Each locator root (``SDCard``, ``store``) is mounted on a host directory
from StoreConfig. A Connection is the open handle on one locator: it
answers attribute queries, creates, deletes and renames its target, and
hands out byte streams. Roots listed as encrypted behave like a device
with transparent encryption switched on: every file created there is
stored with the encryption suffix appended to its name, while callers
keep addressing it by the plain name.
"""

import logging
import shutil
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from .config import StoreConfig
from .errors import (
    AlreadyExistsError,
    FilesystemUnavailableError,
    InvalidLocatorError,
    MissingParentError,
    NotFoundError,
    PermissionDeniedError,
    StoreIOError,
    translate_os_errors,
)
from .locator import PATH_SEPARATOR, Locator, parse, strip_encryption_suffix

logger = logging.getLogger(__name__)


class AccessMode(Enum):
    """Access rights requested when opening a connection."""

    READ = "r"
    WRITE = "w"
    READ_WRITE = "rw"

    @property
    def can_read(self) -> bool:
        return "r" in self.value

    @property
    def can_write(self) -> bool:
        return "w" in self.value


class Device:
    """The set of mounted roots a locator can resolve against."""

    def __init__(self, config: StoreConfig) -> None:
        self.config = config

    def open(self, locator: "str | Locator", mode: AccessMode = AccessMode.READ_WRITE) -> "Connection":
        """Open a connection on ``locator``.

        Raises:
            InvalidLocatorError: If the locator is malformed or names an
                encrypted file by its stored (suffixed) name.
            FilesystemUnavailableError: If the root is not mounted.
        """
        loc = parse(locator)
        self.root_directory(loc.root)
        # Only files carry the suffix; a directory may legitimately end with it
        if (
            self.is_encrypted(loc.root)
            and not loc.is_directory
            and strip_encryption_suffix(loc.name, self.config.encryption_suffix) != loc.name
        ):
            raise InvalidLocatorError(
                f"Encrypted names are not addressable, strip "
                f"{self.config.encryption_suffix!r} first: {loc}",
                locator=loc,
            )
        return Connection(self, loc, mode)

    def root_directory(self, root: str) -> Path:
        """Host directory mounted at ``root``."""
        mount = self.config.roots.get(root)
        if mount is None:
            raise FilesystemUnavailableError(f"No volume mounted at root {root!r}", locator=root)
        path = Path(mount)
        try:
            mounted = path.is_dir()
        except OSError as exc:
            raise FilesystemUnavailableError(
                f"Volume for root {root!r} is not accessible: {exc}", locator=root
            ) from exc
        if not mounted:
            raise FilesystemUnavailableError(
                f"Volume for root {root!r} is not accessible: {path}", locator=root
            )
        return path

    def is_encrypted(self, root: str) -> bool:
        return self.config.is_encrypted(root)

    def stored_name(self, root: str, name: str) -> str:
        """Name a newly created file gets on disk under ``root``."""
        if self.is_encrypted(root):
            return name + self.config.encryption_suffix
        return name

    def resolve(self, locator: "str | Locator") -> Path:
        """Host path of the entry ``locator`` names.

        An existing suffixed file wins over the plain name, so files
        encrypted before encryption was switched off stay reachable.
        Entries that do not exist yet resolve to the plain name.
        """
        loc = parse(locator)
        base = self.root_directory(loc.root)
        if loc.is_root:
            return base

        parent = base.joinpath(*loc.segments[:-1])
        suffixed = parent / (loc.name + self.config.encryption_suffix)
        with translate_os_errors(loc):
            if suffixed.is_file():
                return suffixed
        return parent / loc.name


class Connection:
    """An open handle on one locator.

    Handles are cheap and short-lived: open one right before use and
    release it with ``close()`` (or a ``with`` block) on every exit path.
    Streams handed out by a connection are owned by the caller and must
    be closed separately.
    """

    def __init__(self, device: Device, locator: Locator, mode: AccessMode) -> None:
        self._device = device
        self.locator = locator
        self.mode = mode
        self._closed = False

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else self.mode.name
        return f"Connection({self.locator}, {state})"

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise StoreIOError(f"Connection is closed: {self.locator}", locator=self.locator)

    def _require(self, write: bool) -> None:
        self._check_open()
        allowed = self.mode.can_write if write else self.mode.can_read
        if not allowed:
            action = "write" if write else "read"
            raise PermissionDeniedError(
                f"Connection opened {self.mode.name} cannot {action}: {self.locator}",
                locator=self.locator,
            )

    def _path(self) -> Path:
        return self._device.resolve(self.locator)

    def _existing_path(self) -> Path:
        path = self._path()
        if not path.exists():
            raise NotFoundError(f"Not found: {self.locator}", locator=self.locator)
        return path

    def _parent_path(self) -> Path:
        parent = self.locator.parent
        path = self._device.resolve(parent)
        if not path.is_dir():
            raise MissingParentError(f"Parent directory does not exist: {parent}", locator=self.locator)
        return path

    @property
    def name(self) -> str:
        """Leaf name as stored on disk; directories end with ``/``."""
        self._check_open()
        if self.locator.is_root:
            return self.locator.root + PATH_SEPARATOR
        with translate_os_errors(self.locator):
            path = self._path()
            if path.is_dir():
                return path.name + PATH_SEPARATOR
            return path.name

    def exists(self) -> bool:
        self._require(write=False)
        with translate_os_errors(self.locator):
            return self._path().exists()

    def is_directory(self) -> bool:
        self._require(write=False)
        with translate_os_errors(self.locator):
            return self._path().is_dir()

    def create(self) -> None:
        """Create the target as an empty file."""
        self._require(write=True)
        if self.locator.is_directory:
            raise InvalidLocatorError(f"Cannot create a file at a directory locator: {self.locator}",
                                      locator=self.locator)
        with translate_os_errors(self.locator):
            if self._path().exists():
                raise AlreadyExistsError(f"Already exists: {self.locator}", locator=self.locator)
            parent = self._parent_path()
            target = parent / self._device.stored_name(self.locator.root, self.locator.name)
            target.open("xb").close()
        logger.debug("Created %s as %s", self.locator, target.name)

    def mkdir(self) -> None:
        """Create the target as a directory, one level only."""
        self._require(write=True)
        with translate_os_errors(self.locator):
            if self._path().exists():
                raise AlreadyExistsError(f"Already exists: {self.locator}", locator=self.locator)
            if self.locator.is_root:
                raise FilesystemUnavailableError(f"Cannot create a root: {self.locator}",
                                                 locator=self.locator)
            (self._parent_path() / self.locator.name).mkdir()
        logger.debug("Created directory %s", self.locator)

    def delete(self) -> None:
        """Delete the target file, or the target directory if it is empty."""
        self._require(write=True)
        if self.locator.is_root:
            raise PermissionDeniedError(f"Cannot delete a root: {self.locator}", locator=self.locator)
        with translate_os_errors(self.locator):
            path = self._existing_path()
            if path.is_dir():
                path.rmdir()
            else:
                path.unlink()
        logger.debug("Deleted %s", self.locator)

    def rename(self, new_name: str) -> None:
        """Rename the target within its directory.

        On encrypted roots a suffixed ``new_name`` is accepted and the
        suffix is re-applied to files, so a stored name captured from
        ``name`` round-trips.
        """
        self._require(write=True)
        if not new_name or PATH_SEPARATOR in new_name.rstrip(PATH_SEPARATOR):
            raise InvalidLocatorError(f"New name must not contain a path: {new_name!r}",
                                      locator=self.locator)
        new_name = new_name.rstrip(PATH_SEPARATOR)
        root = self.locator.root

        with translate_os_errors(self.locator):
            path = self._existing_path()
            if self._device.is_encrypted(root):
                logical = strip_encryption_suffix(new_name, self._device.config.encryption_suffix)
            else:
                logical = new_name
            renamed = self.locator.with_name(logical)

            if self._device.resolve(renamed).exists():
                raise AlreadyExistsError(f"Already exists: {renamed}", locator=renamed)

            stored = logical if path.is_dir() else self._device.stored_name(root, logical)
            path.rename(path.parent / stored)

        logger.debug("Renamed %s to %s", self.locator, stored)
        self.locator = renamed

    def list(self) -> list[str]:
        """Stored names of the directory's entries; directories end with ``/``."""
        self._require(write=False)
        with translate_os_errors(self.locator):
            path = self._existing_path()
            if not path.is_dir():
                raise StoreIOError(f"Not a directory: {self.locator}", locator=self.locator)
            return sorted(
                entry.name + PATH_SEPARATOR if entry.is_dir() else entry.name
                for entry in path.iterdir()
            )

    def file_size(self) -> int:
        self._require(write=False)
        with translate_os_errors(self.locator):
            path = self._existing_path()
            if path.is_dir():
                raise StoreIOError(f"Not a file: {self.locator}", locator=self.locator)
            return path.stat().st_size

    def directory_size(self, include_subdirs: bool = False) -> int:
        """Total size of the files in the directory."""
        self._require(write=False)
        with translate_os_errors(self.locator):
            path = self._existing_path()
            if not path.is_dir():
                raise StoreIOError(f"Not a directory: {self.locator}", locator=self.locator)
            entries = path.rglob("*") if include_subdirs else path.iterdir()
            return sum(entry.stat().st_size for entry in entries if entry.is_file())

    def _disk_usage(self):
        self._require(write=False)
        mount = self._device.root_directory(self.locator.root)
        try:
            return shutil.disk_usage(mount)
        except OSError as exc:
            raise FilesystemUnavailableError(
                f"Cannot query space on {self.locator.root!r}: {exc}", locator=self.locator
            ) from exc

    def available_size(self) -> int:
        return self._disk_usage().free

    def total_size(self) -> int:
        return self._disk_usage().total

    def used_size(self) -> int:
        return self._disk_usage().used

    def open_input_stream(self) -> BinaryIO:
        self._require(write=False)
        with translate_os_errors(self.locator):
            path = self._existing_path()
            if path.is_dir():
                raise StoreIOError(f"Cannot read a directory: {self.locator}", locator=self.locator)
            return path.open("rb")

    def open_output_stream(self) -> BinaryIO:
        """Writable stream on an existing file, positioned at its start."""
        self._require(write=True)
        with translate_os_errors(self.locator):
            path = self._existing_path()
            if path.is_dir():
                raise StoreIOError(f"Cannot write a directory: {self.locator}", locator=self.locator)
            return path.open("wb")
