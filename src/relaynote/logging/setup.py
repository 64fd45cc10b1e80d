"""Structured logging configuration for relaynote.

Provides JSON and text formatters, a context filter that guarantees
the notification fields exist on every log record, and a one-call
``configure_logging`` function driven by config settings.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from relaynote.config.settings import LoggingSettings

# Attributes that are part of the standard LogRecord.  Everything
# else is considered "extra" and gets included in structured output.
_STANDARD_ATTRS = frozenset(
    {
        "args",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
        # Well-known context attributes (handled explicitly):
        "notification_id",
        "notification_type",
    }
)


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class StructuredFormatter(logging.Formatter):
    """JSON-lines formatter.

    Every record becomes a single JSON object on one line containing
    the standard fields plus any *extra* attributes passed by the
    caller or injected by filters.
    """

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()

        data: dict = {
            "timestamp": datetime.fromtimestamp(
                record.created,
                tz=UTC,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.message,
        }

        notification_id = getattr(record, "notification_id", None)
        if notification_id not in (None, "-"):
            data["notification_id"] = notification_id

        notification_type = getattr(record, "notification_type", None)
        if notification_type not in (None, "-"):
            data["notification_type"] = notification_type

        # Caller-supplied extra fields
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                data.setdefault(key, value)

        if record.exc_info and record.exc_info[0] is not None:
            data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            data["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter for development / console use."""

    _FMT = "%(asctime)s %(levelname)-8s [%(notification_id)s] %(name)s: %(message)s"

    def __init__(self) -> None:
        super().__init__(fmt=self._FMT, datefmt="%Y-%m-%d %H:%M:%S")


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------


class NotificationContextFilter(logging.Filter):
    """Default the notification context attributes on every record.

    Engine code passes ``notification_id`` / ``notification_type`` via
    ``extra=``; records from elsewhere get ``"-"`` so the text format
    string never fails.
    """

    CONTEXT_ATTRS = frozenset({"notification_id", "notification_type"})

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for attr in self.CONTEXT_ATTRS:
            if not hasattr(record, attr):
                setattr(record, attr, "-")
        return True


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def configure_logging(settings: LoggingSettings, *, stream=None) -> logging.Logger:
    """Configure the ``relaynote`` logger hierarchy from settings.

    Replaces any bootstrap handlers with properly formatted output.

    Returns the root ``relaynote`` logger.
    """
    level = getattr(logging, settings.level.upper(), logging.INFO)

    root = logging.getLogger("relaynote")
    root.setLevel(level)
    root.handlers.clear()
    root.propagate = False

    formatter: logging.Formatter
    formatter = StructuredFormatter() if settings.format == "json" else TextFormatter()

    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(formatter)
    console.addFilter(NotificationContextFilter())
    root.addHandler(console)

    # Displays from LoggingSink are the demo's output; keep them visible
    # even when the rest of the engine is at WARNING.
    sink = logging.getLogger("relaynote.sink")
    sink.setLevel(min(level, logging.INFO))

    # Quieten noisy third-party loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    return root
