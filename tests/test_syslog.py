"""Tests for the process-wide event log registration."""

import logging

import pytest

from safe_store import syslog
from safe_store.errors import NotInitializedError


class TestSetup:
    def test_registers(self):
        assert syslog.is_registered() is False
        assert syslog.setup("MyApp", 0x1234) is True
        assert syslog.is_registered() is True

    def test_idempotent(self):
        assert syslog.setup("MyApp", 0x1234) is True
        assert syslog.setup("Other", 0x9999) is True
        assert syslog._state.name == "MyApp"
        assert syslog._state.guid == 0x1234

    def test_missing_name_fails(self):
        assert syslog.setup("", 0x1234) is False
        assert syslog.is_registered() is False

    def test_missing_guid_fails(self):
        assert syslog.setup("MyApp", None) is False
        assert syslog.is_registered() is False


class TestLog:
    def test_unregistered_fails_loudly(self):
        with pytest.raises(NotInitializedError, match="setup"):
            syslog.log("hello")

    def test_writes_to_event_logger(self, caplog):
        syslog.setup("MyApp", 0xABC)
        with caplog.at_level(logging.INFO, logger="eventlog.MyApp"):
            syslog.log("card removed")
        assert "card removed" in caplog.text
        assert "0xabc" in caplog.text
