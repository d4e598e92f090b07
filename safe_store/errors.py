"""Custom exceptions and error-code descriptions for the storage layer."""

import errno
from contextlib import contextmanager
from enum import Enum
from typing import Iterator


class ErrorCode(Enum):
    """Closed set of failure kinds reported by the storage layer."""

    INVALID_LOCATOR = "invalid_locator"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    INSUFFICIENT_SPACE = "insufficient_space"
    FILESYSTEM_UNAVAILABLE = "filesystem_unavailable"
    IO_ERROR = "io_error"
    DIRECTORY_NOT_EMPTY = "directory_not_empty"
    NOT_INITIALIZED = "not_initialized"
    CONFIG_ERROR = "config_error"


_DESCRIPTIONS: dict[ErrorCode, str] = {
    ErrorCode.INVALID_LOCATOR: "Malformed file locator",
    ErrorCode.PERMISSION_DENIED: "Insufficient access rights",
    ErrorCode.NOT_FOUND: "File or directory not found",
    ErrorCode.ALREADY_EXISTS: "File or directory already exists",
    ErrorCode.INSUFFICIENT_SPACE: "Not enough free space on the filesystem",
    ErrorCode.FILESYSTEM_UNAVAILABLE: "Filesystem is not mounted or not accessible",
    ErrorCode.IO_ERROR: "Read or write failure",
    ErrorCode.DIRECTORY_NOT_EMPTY: "Directory is not empty",
    ErrorCode.NOT_INITIALIZED: "Facility used before initialization",
    ErrorCode.CONFIG_ERROR: "Invalid configuration",
}

_UNKNOWN_DESCRIPTION = "Unknown error"

_ERRNO_CODES: dict[int, ErrorCode] = {
    errno.ENOENT: ErrorCode.NOT_FOUND,
    errno.ENOTDIR: ErrorCode.NOT_FOUND,
    errno.EACCES: ErrorCode.PERMISSION_DENIED,
    errno.EPERM: ErrorCode.PERMISSION_DENIED,
    errno.EROFS: ErrorCode.PERMISSION_DENIED,
    errno.EEXIST: ErrorCode.ALREADY_EXISTS,
    errno.ENOSPC: ErrorCode.INSUFFICIENT_SPACE,
    errno.EDQUOT: ErrorCode.INSUFFICIENT_SPACE,
    errno.ENOTEMPTY: ErrorCode.DIRECTORY_NOT_EMPTY,
    errno.ENODEV: ErrorCode.FILESYSTEM_UNAVAILABLE,
    errno.ENXIO: ErrorCode.FILESYSTEM_UNAVAILABLE,
    errno.ENAMETOOLONG: ErrorCode.INVALID_LOCATOR,
    errno.EINVAL: ErrorCode.INVALID_LOCATOR,
}


def describe_error(code: object) -> str:
    """Return a human-readable message for an error code.

    Total over its input: anything that is not a known ErrorCode
    maps to a generic message instead of raising.
    """
    if isinstance(code, ErrorCode):
        return _DESCRIPTIONS.get(code, _UNKNOWN_DESCRIPTION)
    return _UNKNOWN_DESCRIPTION


def error_code_for_errno(number: int | None) -> ErrorCode:
    """Classify a low-level errno value. Unrecognized values are IO errors."""
    if number is None:
        return ErrorCode.IO_ERROR
    return _ERRNO_CODES.get(number, ErrorCode.IO_ERROR)


class StoreError(Exception):
    """Base exception for storage layer errors.

    Carries the locator the failure concerns, when one is known.
    """

    code = ErrorCode.IO_ERROR

    def __init__(self, message: str = "", *, locator: object = None) -> None:
        super().__init__(message or describe_error(self.code))
        self.locator = locator

    @property
    def description(self) -> str:
        return describe_error(self.code)


class InvalidLocatorError(StoreError):
    """Raised when a locator string is malformed."""

    code = ErrorCode.INVALID_LOCATOR


class PermissionDeniedError(StoreError):
    """Raised when the handle or the host denies access."""

    code = ErrorCode.PERMISSION_DENIED


class NotFoundError(StoreError):
    """Raised when an entry that must exist is missing."""

    code = ErrorCode.NOT_FOUND


class MissingParentError(NotFoundError):
    """Raised when creating an entry whose parent directory does not exist."""
    pass


class AlreadyExistsError(StoreError):
    """Raised on a name collision during create or rename."""

    code = ErrorCode.ALREADY_EXISTS


class InsufficientSpaceError(StoreError):
    """Raised when the free-space probe rejects a write."""

    code = ErrorCode.INSUFFICIENT_SPACE


class FilesystemUnavailableError(StoreError):
    """Raised when the volume behind a root is not mounted or accessible."""

    code = ErrorCode.FILESYSTEM_UNAVAILABLE


class StoreIOError(StoreError):
    """Generic read/write/flush failure."""

    code = ErrorCode.IO_ERROR


class DirectoryNotEmptyError(StoreError):
    """Raised by a non-recursive delete on a populated directory."""

    code = ErrorCode.DIRECTORY_NOT_EMPTY


class NotInitializedError(StoreError):
    """Raised when the event log is used before setup()."""

    code = ErrorCode.NOT_INITIALIZED


class ConfigError(StoreError):
    """Configuration file read or validation failure."""

    code = ErrorCode.CONFIG_ERROR


_CLASSES: dict[ErrorCode, type[StoreError]] = {
    ErrorCode.INVALID_LOCATOR: InvalidLocatorError,
    ErrorCode.PERMISSION_DENIED: PermissionDeniedError,
    ErrorCode.NOT_FOUND: NotFoundError,
    ErrorCode.ALREADY_EXISTS: AlreadyExistsError,
    ErrorCode.INSUFFICIENT_SPACE: InsufficientSpaceError,
    ErrorCode.FILESYSTEM_UNAVAILABLE: FilesystemUnavailableError,
    ErrorCode.DIRECTORY_NOT_EMPTY: DirectoryNotEmptyError,
}


def from_os_error(exc: OSError, locator: object = None) -> StoreError:
    """Build the typed StoreError matching an OSError's errno."""
    code = error_code_for_errno(exc.errno)
    cls = _CLASSES.get(code, StoreIOError)
    reason = exc.strerror or str(exc)
    where = f" {locator}" if locator is not None else ""
    return cls(f"{describe_error(code)}{where}: {reason}", locator=locator)


@contextmanager
def translate_os_errors(locator: object = None) -> Iterator[None]:
    """Re-raise any OSError in the block as the matching StoreError."""
    try:
        yield
    except OSError as exc:
        raise from_os_error(exc, locator) from exc
