"""Static priority and notification-type registry.

Pure data.  Per-priority presentation (color, sound, vibration,
volume) and per-type defaults (priority, icon, aggregate URL).  Users
override type priorities through :class:`NotificationSettings`; nothing
here is mutated at runtime.
"""

from __future__ import annotations

from types import MappingProxyType

from relaynote.core.types import NotificationType, Priority

# ---------------------------------------------------------------------------
# Priority presentation
# ---------------------------------------------------------------------------

PRIORITY_COLORS = MappingProxyType(
    {
        Priority.CRITICAL: "#dc2626",
        Priority.HIGH: "#ea580c",
        Priority.MEDIUM: "#2563eb",
        Priority.LOW: "#6b7280",
    }
)

PRIORITY_SOUNDS = MappingProxyType(
    {
        Priority.CRITICAL: "/sounds/urgent.mp3",
        Priority.HIGH: "/sounds/important.mp3",
        Priority.MEDIUM: "/sounds/default.mp3",
        Priority.LOW: "/sounds/soft.mp3",
    }
)

PRIORITY_VIBRATION: MappingProxyType[Priority, tuple[int, ...] | None] = MappingProxyType(
    {
        Priority.CRITICAL: (100, 50, 100, 50, 100),
        Priority.HIGH: (200, 100, 200),
        Priority.MEDIUM: (200,),
        Priority.LOW: None,
    }
)

PRIORITY_VOLUME = MappingProxyType(
    {
        Priority.CRITICAL: 0.8,
        Priority.HIGH: 0.6,
        Priority.MEDIUM: 0.4,
        Priority.LOW: 0.4,
    }
)

# ---------------------------------------------------------------------------
# Type defaults
# ---------------------------------------------------------------------------

DEFAULT_PRIORITY = Priority.MEDIUM

TYPE_PRIORITIES = MappingProxyType(
    {
        NotificationType.TASK_ASSIGNED: Priority.MEDIUM,
        NotificationType.DEADLINE_APPROACHING: Priority.HIGH,
        NotificationType.DEADLINE_CRITICAL: Priority.CRITICAL,
        NotificationType.DEADLINE_OVERDUE: Priority.CRITICAL,
        NotificationType.ATTENDANCE_CLOCK_IN: Priority.LOW,
        NotificationType.DAILY_TASK_REMINDER: Priority.LOW,
        NotificationType.SYSTEM_ERROR: Priority.HIGH,
        NotificationType.CONNECTION_STATUS: Priority.LOW,
    }
)

DEFAULT_ICON = "/icons/logo-512.png"
DEFAULT_BADGE = "/icons/badge.png"

TYPE_ICONS = MappingProxyType(
    {
        NotificationType.TASK_ASSIGNED: "/icons/task-assigned.png",
        NotificationType.TASK_COMPLETED: "/icons/task-completed.png",
        NotificationType.DEADLINE_CRITICAL: "/icons/deadline-critical.png",
        NotificationType.DEADLINE_APPROACHING: "/icons/deadline.png",
        NotificationType.ATTENDANCE_CLOCK_IN: "/icons/clock-in.png",
        NotificationType.ATTENDANCE_CLOCK_OUT: "/icons/clock-out.png",
        NotificationType.SYSTEM_ERROR: "/icons/error.png",
        NotificationType.SYSTEM_SUCCESS: "/icons/success.png",
    }
)

DEFAULT_BATCH_URL = "/dashboard"

BATCH_URLS = MappingProxyType(
    {
        NotificationType.TASK_ASSIGNED: "/dashboard?tab=my-tasks&filter=assigned-to-me",
        NotificationType.TASK_COMPLETED: "/dashboard?tab=my-tasks&filter=completed",
        NotificationType.DEADLINE_APPROACHING: "/dashboard?tab=my-tasks&filter=due-soon",
        NotificationType.ATTENDANCE_CLOCK_IN: "/dashboard?tab=attendance",
    }
)


def default_priority(notification_type: NotificationType) -> Priority:
    return TYPE_PRIORITIES.get(notification_type, DEFAULT_PRIORITY)


def default_icon(notification_type: NotificationType) -> str:
    return TYPE_ICONS.get(notification_type, DEFAULT_ICON)


def batch_url(notification_type: NotificationType) -> str:
    return BATCH_URLS.get(notification_type, DEFAULT_BATCH_URL)
