"""Notification entity and its delivery bookkeeping records."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from relaynote.core.state import assert_transition, log_transition
from relaynote.core.types import NotificationState, NotificationType, Priority

if TYPE_CHECKING:
    from datetime import datetime

    from relaynote.core.scheduler import TimerHandle


def generate_id(now_ms: int | None = None) -> str:
    """Return an id of the form ``notif_<epoch-ms>_<9 hex chars>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"notif_{now_ms}_{uuid4().hex[:9]}"


@dataclass(frozen=True)
class NotificationAction:
    action: str
    title: str
    icon: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"action": self.action, "title": self.title}
        if self.icon:
            out["icon"] = self.icon
        return out

    @classmethod
    def coerce(cls, value: NotificationAction | dict) -> NotificationAction:
        if isinstance(value, NotificationAction):
            return value
        return cls(action=value["action"], title=value["title"], icon=value.get("icon"))


@dataclass
class Notification:
    """A single user-facing alert request.

    Content is fixed once created; only :attr:`attempts` and
    :attr:`state` change while the engine works on it.
    """

    id: str
    title: str
    message: str
    type: NotificationType
    priority: Priority
    data: dict[str, Any] = field(default_factory=dict)
    actions: tuple[NotificationAction, ...] = ()
    icon: str | None = None
    badge: str | None = None
    timestamp: str = ""
    persistent: bool = False
    silent: bool = False
    tag: str | None = None
    renotify: bool = False
    require_interaction: bool = False
    sound: str | None = None
    vibrate: tuple[int, ...] | None = None
    attempts: int = 0
    state: NotificationState = NotificationState.PENDING

    @property
    def url(self) -> str | None:
        return self.data.get("url")

    def advance(self, target: NotificationState, *, reason: str | None = None) -> None:
        """Move to *target*, enforcing the lifecycle transition table."""
        assert_transition(self.state, target)
        log_transition(self.id, self.state, target, reason=reason)
        self.state = target

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "priority": self.priority.level,
            "data": dict(self.data),
            "actions": [a.to_dict() for a in self.actions],
            "icon": self.icon,
            "badge": self.badge,
            "timestamp": self.timestamp,
            "persistent": self.persistent,
            "silent": self.silent,
            "tag": self.tag,
            "renotify": self.renotify,
            "requireInteraction": self.require_interaction,
            "sound": self.sound,
            "vibrate": list(self.vibrate) if self.vibrate else None,
            "attempts": self.attempts,
            "state": self.state.value,
        }


@dataclass(frozen=True)
class FailedEntry:
    """A notification that exhausted its retries, kept for diagnostics."""

    notification: Notification
    error: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "notification": self.notification.to_dict(),
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class RetryRecord:
    notification_id: str
    attempts: int
    created_at: datetime


@dataclass
class Batch:
    """Pending same-type, same-priority notifications awaiting a flush."""

    key: str
    members: list[Notification] = field(default_factory=list)
    timer: TimerHandle | None = None

    @staticmethod
    def key_for(notification: Notification) -> str:
        return f"{notification.type.value}_{notification.priority.level}"
