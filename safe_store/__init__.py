"""safe-store: crash-safe file persistence for device-style filesystems."""

__version__ = "0.1.0"

from .config import StoreConfig, config_from_env, load_config
from .device import AccessMode, Connection, Device
from .errors import (
    AlreadyExistsError,
    ConfigError,
    DirectoryNotEmptyError,
    ErrorCode,
    FilesystemUnavailableError,
    InsufficientSpaceError,
    InvalidLocatorError,
    MissingParentError,
    NotFoundError,
    NotInitializedError,
    PermissionDeniedError,
    StoreError,
    StoreIOError,
    describe_error,
)
from .locator import (
    DEVICE_MEMORY_ROOT,
    ENCRYPTION_SUFFIX,
    SDCARD_ROOT,
    TMP_SUFFIX,
    Locator,
    ancestors_of,
    join,
    parse,
    strip_encryption_suffix,
)
from .query import (
    available_space,
    directory_size,
    exists,
    file_size,
    is_device_memory_accessible,
    is_directory,
    is_encryption_enabled,
    is_sdcard_accessible,
    total_space,
    used_space,
)
from .safe_io import copy_file, write_atomically
from .streams import copy_stream
from .tree import (
    create_directory,
    create_directory_with_ancestors,
    delete,
    delete_tree,
    list_directory,
    rename,
)

__all__ = [
    "AccessMode",
    "AlreadyExistsError",
    "ConfigError",
    "Connection",
    "DEVICE_MEMORY_ROOT",
    "Device",
    "DirectoryNotEmptyError",
    "ENCRYPTION_SUFFIX",
    "ErrorCode",
    "FilesystemUnavailableError",
    "InsufficientSpaceError",
    "InvalidLocatorError",
    "Locator",
    "MissingParentError",
    "NotFoundError",
    "NotInitializedError",
    "PermissionDeniedError",
    "SDCARD_ROOT",
    "StoreConfig",
    "StoreError",
    "StoreIOError",
    "TMP_SUFFIX",
    "ancestors_of",
    "available_space",
    "config_from_env",
    "copy_file",
    "copy_stream",
    "create_directory",
    "create_directory_with_ancestors",
    "delete",
    "delete_tree",
    "describe_error",
    "directory_size",
    "exists",
    "file_size",
    "is_device_memory_accessible",
    "is_directory",
    "is_encryption_enabled",
    "is_sdcard_accessible",
    "join",
    "list_directory",
    "load_config",
    "parse",
    "rename",
    "strip_encryption_suffix",
    "total_space",
    "used_space",
    "write_atomically",
]
