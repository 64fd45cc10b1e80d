"""Canonical outbound event definitions.

Single source of truth for all event names the engine emits and their
corresponding :class:`~relaynote.hooks.base.Hook` method names.

This module has **zero** internal dependencies; it can be imported
from anywhere without circular import risk.
"""

from __future__ import annotations

EVENT_METHOD_MAP: dict[str, str] = {
    "notification.clicked": "on_notification_clicked",
    "notification.action": "on_notification_action",
    "notification.failed": "on_notification_failed",
    "connection.change": "on_connection_change",
}

KNOWN_EVENTS: frozenset[str] = frozenset(EVENT_METHOD_MAP.keys())
