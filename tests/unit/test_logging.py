"""Tests for logging setup."""

from __future__ import annotations

import json
import logging
import logging.handlers
from unittest.mock import patch

import pytest

from opal_dump.core.logging import JSONFormatter, configure_logging, resolve_level


class TestResolveLevel:
    """Tests for resolve_level."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("NOTICE", logging.INFO),
            ("notice", logging.INFO),
            ("DEBUG", logging.DEBUG),
            ("ERR", logging.ERROR),
            ("warning", logging.WARNING),
        ],
    )
    def test_known_levels(self, name: str, expected: int) -> None:
        assert resolve_level(name) == expected

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError):
            resolve_level("CHATTY")


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_formats_record(self) -> None:
        record = logging.LogRecord(
            "opal_dump.test", logging.ERROR, __file__, 1, "Failed: %s", ("x",), None
        )
        data = json.loads(JSONFormatter().format(record))
        assert data["level"] == "ERROR"
        assert data["logger"] == "opal_dump.test"
        assert data["message"] == "Failed: x"
        assert "timestamp" in data


@pytest.mark.usefixtures("restore_root_logging")
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_console_only(self) -> None:
        configure_logging(level="DEBUG", syslog=False)
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_json_format(self) -> None:
        configure_logging(json_format=True, syslog=False)
        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_missing_syslog_socket_falls_back(self) -> None:
        with patch("opal_dump.core.logging.os.path.exists", return_value=False):
            configure_logging(syslog=True)
        handlers = logging.getLogger().handlers
        assert not any(isinstance(h, logging.handlers.SysLogHandler) for h in handlers)

    def test_syslog_handler_added(self) -> None:
        fake_handler = logging.NullHandler()
        with patch("opal_dump.core.logging._syslog_handler", return_value=fake_handler):
            configure_logging(syslog=True)
        assert fake_handler in logging.getLogger().handlers
