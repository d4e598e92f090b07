"""Tests for logging setup: debug log file and event log bridge."""

import logging
import logging.handlers

import pytest

from safe_store import syslog
from safe_store.config import StoreConfig
from safe_store.device import Device
from safe_store.log_setup import EventLogHandler, configure_logging


@pytest.fixture
def package_logger():
    """The safe_store logger, with handlers added by a test removed afterwards."""
    logger = logging.getLogger("safe_store")
    before = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in logger.handlers[:]:
        if handler not in before:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


class TestConfigureLogging:
    def test_without_device(self, package_logger):
        assert configure_logging() is package_logger
        assert not any(isinstance(h, logging.handlers.RotatingFileHandler)
                       for h in package_logger.handlers)

    def test_file_log_written(self, package_logger, sdcard_dir, store_dir):
        device = Device(StoreConfig(
            roots={"SDCard": str(sdcard_dir), "store": str(store_dir)},
            log_file="file:///SDCard/application.log",
        ))
        configure_logging(device)
        logging.getLogger("safe_store.tests").debug("hello from the test")
        for handler in package_logger.handlers:
            handler.flush()

        text = (sdcard_dir / "application.log").read_text()
        assert "hello from the test" in text
        assert text.startswith("DEBUG [ ")
        assert " ]: MainThread : safe_store.tests: " in text

    def test_file_handler_capped(self, package_logger, sdcard_dir):
        device = Device(StoreConfig(
            roots={"SDCard": str(sdcard_dir)},
            log_file="file:///SDCard/application.log",
            max_log_bytes=2048,
        ))
        configure_logging(device)
        handlers = [h for h in package_logger.handlers
                    if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(handlers) == 1
        assert handlers[0].maxBytes == 2048

    def test_idempotent(self, package_logger, sdcard_dir):
        device = Device(StoreConfig(
            roots={"SDCard": str(sdcard_dir)},
            log_file="file:///SDCard/application.log",
        ))
        syslog.setup("MyApp", 1)
        configure_logging(device)
        configure_logging(device)
        kinds = [type(h) for h in package_logger.handlers]
        assert kinds.count(logging.handlers.RotatingFileHandler) == 1
        assert kinds.count(EventLogHandler) == 1

    def test_unmounted_log_root_disables_file_log(self, package_logger, tmp_path):
        device = Device(StoreConfig(
            roots={"SDCard": str(tmp_path / "gone")},
            log_file="file:///SDCard/application.log",
        ))
        configure_logging(device)
        assert not any(isinstance(h, logging.handlers.RotatingFileHandler)
                       for h in package_logger.handlers)

    def test_no_event_handler_when_unregistered(self, package_logger):
        configure_logging()
        assert not any(isinstance(h, EventLogHandler) for h in package_logger.handlers)


class TestEventLogHandler:
    def test_forwards_to_event_log(self, caplog):
        syslog.setup("MyApp", 7)
        handler = EventLogHandler()
        record = logging.LogRecord("safe_store.x", logging.INFO, __file__, 1, "temp removed", None, None)
        with caplog.at_level(logging.INFO, logger="eventlog.MyApp"):
            handler.emit(record)
        assert "temp removed" in caplog.text

    def test_unregistered_reports_instead_of_raising(self, monkeypatch):
        handled = []
        handler = EventLogHandler()
        monkeypatch.setattr(handler, "handleError", handled.append)
        record = logging.LogRecord("safe_store.x", logging.INFO, __file__, 1, "lost", None, None)
        handler.emit(record)
        assert handled == [record]
