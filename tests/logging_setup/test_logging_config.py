"""Tests for relaynote.logging: formatters, context filter and setup."""

from __future__ import annotations

import io
import json
import logging
import sys

from relaynote.config.settings import LoggingSettings
from relaynote.logging import configure_logging
from relaynote.logging.setup import (
    NotificationContextFilter,
    StructuredFormatter,
    TextFormatter,
)


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("relaynote.test", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_basic_fields(self):
        data = json.loads(StructuredFormatter().format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "relaynote.test"
        assert data["message"] == "hello"
        assert "timestamp" in data

    def test_notification_context_and_extras(self):
        record = _record(notification_id="notif_1_abc", notification_type="task_assigned", attempts=2)
        data = json.loads(StructuredFormatter().format(record))
        assert data["notification_id"] == "notif_1_abc"
        assert data["notification_type"] == "task_assigned"
        assert data["attempts"] == 2

    def test_placeholder_context_omitted(self):
        data = json.loads(StructuredFormatter().format(_record(notification_id="-")))
        assert "notification_id" not in data

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "relaynote.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )
        data = json.loads(StructuredFormatter().format(record))
        assert "RuntimeError: boom" in data["exception"]


class TestTextFormatter:
    def test_filter_fills_placeholders(self):
        record = _record()
        NotificationContextFilter().filter(record)
        line = TextFormatter().format(record)
        assert "[-] relaynote.test: hello" in line


class TestConfigureLogging:
    def test_text_output(self):
        stream = io.StringIO()
        configure_logging(LoggingSettings(level="INFO", format="text"), stream=stream)
        logging.getLogger("relaynote.engine").info(
            "shown", extra={"notification_id": "notif_9_x"}
        )
        assert "[notif_9_x] relaynote.engine: shown" in stream.getvalue()

    def test_json_output_and_level(self):
        stream = io.StringIO()
        configure_logging(LoggingSettings(level="WARNING", format="json"), stream=stream)
        logging.getLogger("relaynote.engine").info("hidden")
        logging.getLogger("relaynote.engine").warning("visible")
        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["message"] == "visible"

    def test_sink_logger_stays_visible(self):
        stream = io.StringIO()
        configure_logging(LoggingSettings(level="ERROR", format="text"), stream=stream)
        logging.getLogger("relaynote.sink").info("NOTIFY hi: there")
        assert "NOTIFY hi: there" in stream.getvalue()

    def test_reconfigure_replaces_handlers(self):
        configure_logging(LoggingSettings(level="INFO", format="text"), stream=io.StringIO())
        root = configure_logging(
            LoggingSettings(level="INFO", format="text"), stream=io.StringIO()
        )
        assert len(root.handlers) == 1
