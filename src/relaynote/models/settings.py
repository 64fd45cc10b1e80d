"""User-configurable notification settings and analytics counters.

Both are persisted as flat JSON blobs.  There is no migration logic,
so :meth:`NotificationSettings.from_dict` tolerates missing keys
(defaults apply) and keeps unknown keys in :attr:`extra` so they are
written back untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Any

from relaynote.core.types import NotificationType, Priority

log = logging.getLogger(__name__)

_KNOWN_KEYS = frozenset(
    {
        "soundEnabled",
        "vibrationEnabled",
        "desktopEnabled",
        "batchingEnabled",
        "quietHours",
        "priority",
    }
)


@dataclass
class QuietHours:
    enabled: bool = False
    start: str = "22:00"
    end: str = "08:00"

    def to_dict(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: dict | None, base: QuietHours | None = None) -> QuietHours:
        base = base or cls()
        d = data or {}
        return cls(
            enabled=bool(d.get("enabled", base.enabled)),
            start=d.get("start", base.start),
            end=d.get("end", base.end),
        )


def default_priority_overrides() -> dict[NotificationType, Priority]:
    return {
        NotificationType.TASK_ASSIGNED: Priority.MEDIUM,
        NotificationType.DEADLINE_CRITICAL: Priority.CRITICAL,
        NotificationType.DEADLINE_APPROACHING: Priority.HIGH,
        NotificationType.ATTENDANCE_CLOCK_IN: Priority.LOW,
        NotificationType.SYSTEM_ERROR: Priority.HIGH,
    }


@dataclass
class NotificationSettings:
    sound_enabled: bool = True
    vibration_enabled: bool = True
    desktop_enabled: bool = True
    batching_enabled: bool = True
    quiet_hours: QuietHours = field(default_factory=QuietHours)
    priority: dict[NotificationType, Priority] = field(default_factory=default_priority_overrides)
    extra: dict[str, Any] = field(default_factory=dict)

    def priority_for(self, notification_type: NotificationType) -> Priority | None:
        return self.priority.get(notification_type)

    def copy(self) -> NotificationSettings:
        return NotificationSettings.from_dict(self.to_dict())

    def to_dict(self) -> dict[str, Any]:
        out = dict(self.extra)
        out.update(
            {
                "soundEnabled": self.sound_enabled,
                "vibrationEnabled": self.vibration_enabled,
                "desktopEnabled": self.desktop_enabled,
                "batchingEnabled": self.batching_enabled,
                "quietHours": self.quiet_hours.to_dict(),
                "priority": {t.value: p.level for t, p in self.priority.items()},
            }
        )
        return out

    @classmethod
    def from_dict(
        cls,
        data: dict | None,
        base: NotificationSettings | None = None,
    ) -> NotificationSettings:
        """Build settings from a persisted blob, merged over *base*.

        Unknown notification types or priority levels in the
        ``priority`` map are skipped with a warning.
        """
        base = base or cls()
        d = data or {}
        priority = dict(base.priority)
        for type_value, level in (d.get("priority") or {}).items():
            try:
                priority[NotificationType(type_value)] = Priority.coerce(level)
            except ValueError:
                log.warning("Ignoring priority override %r=%r", type_value, level)
        extra = dict(base.extra)
        extra.update({k: v for k, v in d.items() if k not in _KNOWN_KEYS})
        return cls(
            sound_enabled=bool(d.get("soundEnabled", base.sound_enabled)),
            vibration_enabled=bool(d.get("vibrationEnabled", base.vibration_enabled)),
            desktop_enabled=bool(d.get("desktopEnabled", base.desktop_enabled)),
            batching_enabled=bool(d.get("batchingEnabled", base.batching_enabled)),
            quiet_hours=QuietHours.from_dict(d.get("quietHours"), base.quiet_hours),
            priority=priority,
            extra=extra,
        )


@dataclass
class AnalyticsCounters:
    sent: int = 0
    failed: int = 0
    clicked: int = 0
    dismissed: int = 0
    retried: int = 0

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def to_dict(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in self.names()}

    @classmethod
    def from_dict(cls, data: dict | None) -> AnalyticsCounters:
        d = data or {}
        values = {}
        for name in cls.names():
            try:
                values[name] = max(int(d.get(name, 0)), 0)
            except (TypeError, ValueError):
                values[name] = 0
        return cls(**values)
