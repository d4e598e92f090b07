"""Logging setup: console output, a size-capped debug log file, event log bridge."""

import logging
import logging.handlers

from . import syslog
from .device import Device
from .errors import StoreError

PACKAGE_LOGGER = "safe_store"

CONSOLE_FORMAT = "%(levelname)s: %(name)s: %(message)s"
FILE_FORMAT = "%(levelname)s [ %(asctime)s ]: %(threadName)s : %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class EventLogHandler(logging.Handler):
    """Forward log records to the registered system event log."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            syslog.log(self.format(record))
        except Exception:
            self.handleError(record)


def _has_handler(logger: logging.Logger, handler_type: type) -> bool:
    return any(type(h) is handler_type for h in logger.handlers)


def configure_logging(device: Device | None = None, *, verbose: bool = False) -> logging.Logger:
    """Configure console logging and, when available, the file and event log sinks.

    The debug log file is the ``log_file`` locator from the device config,
    rotated once it grows past ``max_log_bytes``. Safe to call repeatedly:
    no handler is attached twice.

    Returns:
        The package logger.
    """
    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=CONSOLE_FORMAT,
        handlers=[console],
    )

    config = device.config if device is not None else None
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    # The file log wants everything; the console handler filters on its own
    if verbose or (config is not None and config.log_file):
        package_logger.setLevel(logging.DEBUG)
    else:
        package_logger.setLevel(logging.INFO)

    if config is not None and config.log_file and not _has_handler(
        package_logger, logging.handlers.RotatingFileHandler
    ):
        try:
            path = device.resolve(config.log_file)
        except StoreError as exc:
            package_logger.warning("Debug log file disabled: %s", exc)
        else:
            file_handler = logging.handlers.RotatingFileHandler(
                filename=path,
                maxBytes=config.max_log_bytes,
                backupCount=1,
                encoding="utf-8",
                delay=True,
            )
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
            file_handler.setLevel(logging.DEBUG)
            package_logger.addHandler(file_handler)

    if syslog.is_registered() and not _has_handler(package_logger, EventLogHandler):
        event_handler = EventLogHandler(level=logging.INFO)
        event_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        package_logger.addHandler(event_handler)

    return package_logger
