"""Analytics recorder: delivery counters persisted as one JSON blob.

Counters only grow, except for an explicit :meth:`AnalyticsRecorder.reset`.
Every mutation is written straight back to the store.  Exports in
Prometheus text format.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from relaynote.models.settings import AnalyticsCounters

if TYPE_CHECKING:
    from relaynote.storage.base import KeyValueStore

log = logging.getLogger(__name__)

_HELP = {
    "sent": "Notifications displayed by the platform",
    "failed": "Display attempts that raised or were rejected",
    "clicked": "Notifications clicked by the user",
    "dismissed": "Notifications closed without a click",
    "retried": "Retry attempts fired after a display failure",
}


class AnalyticsRecorder:
    """Counts sent/failed/clicked/dismissed/retried notifications."""

    def __init__(self, store: KeyValueStore, key: str = "notification_analytics") -> None:
        self._store = store
        self._key = key
        self._counters = self._load()

    def _load(self) -> AnalyticsCounters:
        raw = self._store.get(self._key)
        if raw is None:
            return AnalyticsCounters()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            log.warning("Stored analytics under '%s' are not valid JSON: %s", self._key, exc)
            return AnalyticsCounters()
        if not isinstance(data, dict):
            log.warning("Stored analytics under '%s' are not an object, resetting", self._key)
            return AnalyticsCounters()
        return AnalyticsCounters.from_dict(data)

    def _save(self) -> None:
        self._store.set(self._key, json.dumps(self._counters.to_dict()))

    def increment(self, name: str, amount: int = 1) -> int:
        """Increment counter *name* and persist.  Returns the new value."""
        if name not in AnalyticsCounters.names():
            msg = f"Unknown analytics counter '{name}'; expected one of {AnalyticsCounters.names()}"
            raise ValueError(msg)
        value = getattr(self._counters, name) + amount
        setattr(self._counters, name, value)
        self._save()
        return value

    def get(self, name: str) -> int:
        if name not in AnalyticsCounters.names():
            msg = f"Unknown analytics counter '{name}'"
            raise ValueError(msg)
        return getattr(self._counters, name)

    def snapshot(self) -> dict[str, int]:
        """Copy of all counters."""
        return self._counters.to_dict()

    def reset(self) -> None:
        self._counters = AnalyticsCounters()
        self._save()
        log.info("Notification analytics reset")

    def export(self) -> str:
        """Export all counters in Prometheus text format."""
        lines = []
        for name, value in self._counters.to_dict().items():
            metric = f"relaynote_notifications_{name}_total"
            lines.append(f"# HELP {metric} {_HELP[name]}")
            lines.append(f"# TYPE {metric} counter")
            lines.append(f"{metric} {value}")
            lines.append("")
        return "\n".join(lines) + "\n"
