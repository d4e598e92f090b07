"""Tests for the exception hierarchy and error-code descriptions in safe_store.errors."""

import errno

import pytest

from safe_store.errors import (
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
    error_code_for_errno,
    from_os_error,
    translate_os_errors,
)

ALL_ERRORS = [
    AlreadyExistsError,
    ConfigError,
    DirectoryNotEmptyError,
    FilesystemUnavailableError,
    InsufficientSpaceError,
    InvalidLocatorError,
    MissingParentError,
    NotFoundError,
    NotInitializedError,
    PermissionDeniedError,
    StoreIOError,
]


class TestAllExceptionsSubclassStoreError:
    @pytest.mark.parametrize("cls", ALL_ERRORS)
    def test_subclass(self, cls):
        assert issubclass(cls, StoreError)

    def test_missing_parent_is_not_found(self):
        assert issubclass(MissingParentError, NotFoundError)
        assert MissingParentError.code is ErrorCode.NOT_FOUND


class TestExceptionsCarryMessage:
    def test_message_kept(self):
        assert str(StoreIOError("disk on fire")) == "disk on fire"

    def test_default_message_is_description(self):
        assert str(InsufficientSpaceError()) == describe_error(ErrorCode.INSUFFICIENT_SPACE)

    def test_locator_kept(self):
        err = NotFoundError("gone", locator="file:///SDCard/x")
        assert err.locator == "file:///SDCard/x"

    def test_description_property(self):
        assert DirectoryNotEmptyError("x").description == "Directory is not empty"


class TestDescribeError:
    @pytest.mark.parametrize("code", list(ErrorCode))
    def test_every_code_has_a_description(self, code):
        assert describe_error(code) != "Unknown error"

    @pytest.mark.parametrize("code", [None, 42, "io_error", object()])
    def test_unknown_input_has_default(self, code):
        assert describe_error(code) == "Unknown error"


class TestErrorCodeForErrno:
    @pytest.mark.parametrize("number, code", [
        (errno.ENOENT, ErrorCode.NOT_FOUND),
        (errno.EACCES, ErrorCode.PERMISSION_DENIED),
        (errno.EEXIST, ErrorCode.ALREADY_EXISTS),
        (errno.ENOSPC, ErrorCode.INSUFFICIENT_SPACE),
        (errno.ENOTEMPTY, ErrorCode.DIRECTORY_NOT_EMPTY),
        (errno.ENODEV, ErrorCode.FILESYSTEM_UNAVAILABLE),
    ])
    def test_known_errno(self, number, code):
        assert error_code_for_errno(number) is code

    def test_unknown_errno_is_io_error(self):
        assert error_code_for_errno(999_999) is ErrorCode.IO_ERROR

    def test_none_is_io_error(self):
        assert error_code_for_errno(None) is ErrorCode.IO_ERROR


class TestFromOsError:
    def test_maps_to_typed_error(self):
        err = from_os_error(OSError(errno.ENOSPC, "No space left on device"), "file:///SDCard/a")
        assert isinstance(err, InsufficientSpaceError)
        assert err.locator == "file:///SDCard/a"
        assert "No space left on device" in str(err)

    def test_plain_oserror_is_io_error(self):
        err = from_os_error(OSError("boom"))
        assert isinstance(err, StoreIOError)

    def test_translate_context_manager_chains_cause(self):
        with pytest.raises(PermissionDeniedError) as exc_info:
            with translate_os_errors("file:///store/x"):
                raise PermissionError(errno.EACCES, "Permission denied")
        assert isinstance(exc_info.value.__cause__, PermissionError)

    def test_translate_leaves_other_errors_alone(self):
        with pytest.raises(ValueError):
            with translate_os_errors():
                raise ValueError("not an OS error")
