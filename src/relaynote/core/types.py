"""Enumerated types for the relaynote delivery engine.

String enums inherit from :class:`enum.StrEnum` so their ``.value`` is
a plain string that JSON round-trips naturally.  :class:`Priority` is
an :class:`enum.IntEnum` whose value *is* the urgency weight, so
priorities compare by discriminant and never by object identity.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum

# ---------------------------------------------------------------------------
# Priority
# ---------------------------------------------------------------------------


class Priority(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def weight(self) -> int:
        return int(self)

    @property
    def level(self) -> str:
        """Lower-case name used in batch keys and persisted overrides."""
        return self.name.lower()

    @property
    def color(self) -> str:
        from relaynote.core.registry import PRIORITY_COLORS

        return PRIORITY_COLORS[self]

    @property
    def sound(self) -> str:
        from relaynote.core.registry import PRIORITY_SOUNDS

        return PRIORITY_SOUNDS[self]

    @property
    def vibration(self) -> tuple[int, ...] | None:
        from relaynote.core.registry import PRIORITY_VIBRATION

        return PRIORITY_VIBRATION[self]

    @property
    def volume(self) -> float:
        from relaynote.core.registry import PRIORITY_VOLUME

        return PRIORITY_VOLUME[self]

    @classmethod
    def coerce(cls, value: Priority | int | str) -> Priority:
        """Return the :class:`Priority` for a member, weight, or level name.

        Raises :class:`ValueError` for anything else.
        """
        if isinstance(value, Priority):
            return value
        if isinstance(value, bool):
            msg = f"Invalid priority {value!r}"
            raise ValueError(msg)
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        msg = f"Invalid priority {value!r}; expected one of {[p.level for p in cls]}"
        raise ValueError(msg)


# ---------------------------------------------------------------------------
# Notification types
# ---------------------------------------------------------------------------


class NotificationType(StrEnum):
    TASK_ASSIGNED = "task_assigned"
    TASK_COMPLETED = "task_completed"
    TASK_UPDATED = "task_updated"
    TASK_COMMENT = "task_comment"
    TASK_REMINDER = "task_reminder"
    DEADLINE_APPROACHING = "deadline_approaching"
    DEADLINE_CRITICAL = "deadline_critical"
    DEADLINE_OVERDUE = "deadline_overdue"
    ATTENDANCE_CLOCK_IN = "attendance_clock_in"
    ATTENDANCE_CLOCK_OUT = "attendance_clock_out"
    ATTENDANCE_APPROVED = "attendance_approved"
    ATTENDANCE_REJECTED = "attendance_rejected"
    DAILY_TASK_REMINDER = "daily_task_reminder"
    SYSTEM_UPDATE = "system_update"
    SYSTEM_ERROR = "system_error"
    SYSTEM_SUCCESS = "system_success"
    CONNECTION_STATUS = "connection_status"


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class NotificationState(StrEnum):
    PENDING = "pending"
    BATCHED = "batched"
    DEFERRED = "deferred"
    QUEUED = "queued"
    DELIVERING = "delivering"
    DELIVERED = "delivered"
    RETRYING = "retrying"
    FAILED = "failed"
    CLICKED = "clicked"
    DISMISSED = "dismissed"


# ---------------------------------------------------------------------------
# Host permission
# ---------------------------------------------------------------------------


class PermissionState(StrEnum):
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"
