"""Process-wide system event log.

Call setup() once with an application name and GUID before logging.
There is no teardown. log() refuses to run unregistered rather than
dropping the message.
"""

import logging
from dataclasses import dataclass

from .errors import NotInitializedError

EVENT_LOGGER_PREFIX = "eventlog"


@dataclass
class _Registration:
    name: str | None = None
    guid: int | None = None
    registered: bool = False


_state = _Registration()


def setup(logger_name: str, guid: int) -> bool:
    """Register the event log under ``logger_name`` and ``guid``.

    Idempotent: once registered, later calls keep the first registration
    and return True.

    Returns:
        True if the event log is registered after the call.
    """
    if _state.registered:
        return True
    if not logger_name or guid is None:
        return False
    _state.name = logger_name
    _state.guid = guid
    _state.registered = True
    _event_logger().info("Event log registered (guid=%#x)", guid)
    return True


def is_registered() -> bool:
    return _state.registered


def _event_logger() -> logging.Logger:
    return logging.getLogger(f"{EVENT_LOGGER_PREFIX}.{_state.name}")


def log(message: str) -> None:
    """Write ``message`` to the event log.

    Raises:
        NotInitializedError: If setup() has not registered the event log.
    """
    if not _state.registered:
        raise NotInitializedError("Must call syslog.setup() before logging events")
    _event_logger().info("[%#x] %s", _state.guid, message)
