"""Tests for the chunked copy primitive and the safely-close helpers."""

import io
import logging
from unittest.mock import MagicMock

import pytest

from safe_store.errors import InsufficientSpaceError, StoreIOError
from safe_store.streams import (
    copy_stream,
    safely_close_connection,
    safely_close_input,
    safely_close_output,
)


class TestCopyStream:
    def test_copies_all_bytes(self):
        dst = io.BytesIO()
        assert copy_stream(io.BytesIO(b"hello world"), dst, chunk_size=4) == 11
        assert dst.getvalue() == b"hello world"

    def test_empty_source(self):
        dst = io.BytesIO()
        assert copy_stream(io.BytesIO(b""), dst) == 0
        assert dst.getvalue() == b""

    def test_reads_in_chunks(self):
        src = MagicMock()
        src.read.side_effect = [b"abc", b"def", b""]
        dst = io.BytesIO()
        copy_stream(src, dst, chunk_size=3)
        assert [c.args for c in src.read.call_args_list] == [(3,), (3,), (3,)]

    def test_flushes_once_at_end(self):
        dst = MagicMock()
        copy_stream(io.BytesIO(b"x" * 10), dst, chunk_size=3)
        assert dst.write.call_count == 4
        dst.flush.assert_called_once()

    def test_does_not_close_streams(self):
        src, dst = io.BytesIO(b"data"), io.BytesIO()
        copy_stream(src, dst)
        assert not src.closed
        assert not dst.closed

    def test_read_failure_aborts_with_typed_error(self, failing_reader):
        dst = io.BytesIO()
        with pytest.raises(StoreIOError) as exc_info:
            copy_stream(failing_reader(b"0123456789", fail_at=6), dst, chunk_size=4)
        assert isinstance(exc_info.value.__cause__, OSError)
        assert dst.getvalue() == b"012345"

    def test_failure_attributed_to_given_locator(self, failing_reader):
        dst = MagicMock()
        dst.name = "/host/mount/cfg.json"
        with pytest.raises(StoreIOError) as exc_info:
            copy_stream(failing_reader(b"0123", fail_at=2), dst, locator="file:///store/cfg.json")
        assert exc_info.value.locator == "file:///store/cfg.json"
        assert "/host/mount" not in str(exc_info.value)

    def test_write_failure_maps_errno(self):
        dst = MagicMock()
        dst.write.side_effect = OSError(28, "No space left on device")
        with pytest.raises(InsufficientSpaceError):
            copy_stream(io.BytesIO(b"data"), dst)
        dst.flush.assert_not_called()

    def test_no_retry_after_failure(self):
        src = MagicMock()
        src.read.side_effect = OSError("bad sector")
        with pytest.raises(StoreIOError):
            copy_stream(src, io.BytesIO())
        assert src.read.call_count == 1

    def test_rejects_non_positive_chunk(self):
        with pytest.raises(ValueError):
            copy_stream(io.BytesIO(b"x"), io.BytesIO(), chunk_size=0)


class TestSafelyClose:
    def test_none_is_ignored(self):
        safely_close_input(None)
        safely_close_output(None)
        safely_close_connection(None)

    def test_input_close_failure_swallowed(self):
        stream = MagicMock()
        stream.close.side_effect = OSError("already gone")
        safely_close_input(stream)
        stream.close.assert_called_once()

    def test_output_close_failure_logged(self, caplog):
        stream = MagicMock()
        stream.close.side_effect = OSError("flush failed")
        with caplog.at_level(logging.DEBUG, logger="safe_store.streams"):
            safely_close_output(stream)
        assert "flush failed" in caplog.text

    def test_connection_close_failure_swallowed(self):
        conn = MagicMock()
        conn.close.side_effect = RuntimeError("handle lost")
        safely_close_connection(conn)
        conn.close.assert_called_once()

    def test_closes_real_streams(self):
        stream = io.BytesIO()
        safely_close_output(stream)
        assert stream.closed
