"""Shared fixtures for safe_store tests."""

import io
from collections import namedtuple

import pytest

from safe_store import syslog
from safe_store.config import StoreConfig
from safe_store.device import Device

DiskUsage = namedtuple("DiskUsage", ["total", "used", "free"])


class FailingReader(io.RawIOBase):
    """Readable stream that raises OSError once ``fail_at`` bytes were read."""

    def __init__(self, data: bytes, fail_at: int) -> None:
        self._data = data
        self._fail_at = fail_at
        self._pos = 0

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if self._pos >= self._fail_at:
            raise OSError(5, "Input/output error")
        end = min(self._pos + size, self._fail_at, len(self._data))
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk


@pytest.fixture
def sdcard_dir(tmp_path):
    """Host directory mounted at the SDCard root."""
    path = tmp_path / "sdcard"
    path.mkdir()
    return path


@pytest.fixture
def store_dir(tmp_path):
    """Host directory mounted at the device memory root."""
    path = tmp_path / "store"
    path.mkdir()
    return path


@pytest.fixture
def config(sdcard_dir, store_dir):
    return StoreConfig(roots={"SDCard": str(sdcard_dir), "store": str(store_dir)})


@pytest.fixture
def device(config):
    return Device(config)


@pytest.fixture
def encrypted_device(sdcard_dir, store_dir):
    """Device whose SDCard root stores new files with the encryption suffix."""
    return Device(StoreConfig(
        roots={"SDCard": str(sdcard_dir), "store": str(store_dir)},
        encrypted_roots=("SDCard",),
    ))


@pytest.fixture
def small_chunk_device(sdcard_dir, store_dir):
    """Device copying in 4-byte chunks so failures can land mid-file."""
    return Device(StoreConfig(
        roots={"SDCard": str(sdcard_dir), "store": str(store_dir)},
        chunk_size=4,
    ))


@pytest.fixture
def disk_usage():
    """Factory for fake shutil.disk_usage results."""
    def _create(free: int, total: int = 1_000_000):
        return DiskUsage(total=total, used=total - free, free=free)
    return _create


@pytest.fixture(autouse=True)
def fresh_syslog(monkeypatch):
    """Each test starts with an unregistered event log."""
    monkeypatch.setattr(syslog, "_state", syslog._Registration())


@pytest.fixture
def failing_reader():
    """Factory for streams that fail with an I/O error at a byte offset."""
    return FailingReader
