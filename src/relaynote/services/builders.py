"""Convenience builders for common business events.

Thin wrappers that fill :meth:`NotificationEngine.show` with
type-appropriate copy, priority, target URL and action buttons.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from relaynote.core.types import NotificationType, Priority
from relaynote.models.notification import NotificationAction

if TYPE_CHECKING:
    from relaynote.models.result import ShowResult
    from relaynote.services.engine import NotificationEngine

VIEW_TASK = NotificationAction("view", "View Task", "/icons/view.png")
MARK_DONE = NotificationAction("mark-done", "Mark Done", "/icons/check.png")
VIEW_DETAILS = NotificationAction("view", "View Details", "/icons/view.png")
SNOOZE = NotificationAction("snooze", "Snooze 1h", "/icons/snooze.png")
CLOCK_IN = NotificationAction("clock-in", "Clock In", "/icons/clock.png")


def _task_url(task_id: str | None) -> str:
    if task_id is None:
        return "/dashboard?tab=my-tasks"
    return f"/dashboard?tab=my-tasks&taskId={task_id}"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_time_remaining(hours: float) -> str:
    """Describe *hours* as ``right now`` / ``in N minutes`` / ``in N hours`` / ``in N days``."""
    if hours < 0.5:
        return "right now"
    if hours < 1:
        minutes = _round_half_up(hours * 60)
        return f"in {minutes} minute{'' if minutes == 1 else 's'}"
    if hours < 24:
        whole = _round_half_up(hours)
        return f"in {whole} hour{'' if whole == 1 else 's'}"
    days = _round_half_up(hours / 24)
    return f"in {days} day{'' if days == 1 else 's'}"


def show_task_assigned(
    engine: NotificationEngine,
    *,
    task: str,
    assigned_by: str,
    task_id: str | None = None,
    deadline: str | None = None,
    urgent: bool = False,
) -> ShowResult:
    return engine.show(
        "New Task Assigned",
        f'{assigned_by} assigned you: "{task}"',
        type=NotificationType.TASK_ASSIGNED,
        data={"taskId": task_id, "assignedBy": assigned_by, "deadline": deadline},
        url=_task_url(task_id),
        actions=(VIEW_TASK, MARK_DONE),
        require_interaction=urgent,
    )


def show_task_completed(
    engine: NotificationEngine,
    *,
    task: str,
    completed_by: str,
    task_id: str | None = None,
) -> ShowResult:
    return engine.show(
        "Task Completed",
        f'{completed_by} completed: "{task}"',
        type=NotificationType.TASK_COMPLETED,
        priority=Priority.MEDIUM,
        data={"taskId": task_id, "completedBy": completed_by},
        url=_task_url(task_id),
        actions=(VIEW_DETAILS,),
    )


def show_deadline_approaching(
    engine: NotificationEngine,
    *,
    task: str,
    hours_remaining: float,
    task_id: str | None = None,
    deadline: str | None = None,
) -> ShowResult:
    """Escalates with the time left: critical within 1 h, high within 6 h."""
    critical = hours_remaining <= 1
    urgent = hours_remaining <= 6
    if critical:
        title, notification_type, priority = (
            "URGENT: Deadline NOW!",
            NotificationType.DEADLINE_CRITICAL,
            Priority.CRITICAL,
        )
    elif urgent:
        title, notification_type, priority = (
            "Deadline Approaching",
            NotificationType.DEADLINE_APPROACHING,
            Priority.HIGH,
        )
    else:
        title, notification_type, priority = (
            "Deadline Reminder",
            NotificationType.DEADLINE_APPROACHING,
            Priority.MEDIUM,
        )
    return engine.show(
        title,
        f'"{task}" is due {format_time_remaining(hours_remaining)}',
        type=notification_type,
        priority=priority,
        data={"taskId": task_id, "deadline": deadline, "hoursRemaining": hours_remaining},
        url=_task_url(task_id),
        require_interaction=critical,
        actions=(VIEW_TASK, SNOOZE),
    )


def show_attendance_reminder(engine: NotificationEngine) -> ShowResult:
    return engine.show(
        "Don't Forget to Clock In",
        "Remember to mark your attendance for today",
        type=NotificationType.ATTENDANCE_CLOCK_IN,
        priority=Priority.MEDIUM,
        url="/dashboard?tab=attendance",
        actions=(CLOCK_IN,),
    )


def show_daily_task_reminder(engine: NotificationEngine, *, task_count: int = 0) -> ShowResult:
    message = (
        f"You have {task_count} incomplete daily tasks"
        if task_count > 0
        else "Don't forget to log your daily tasks"
    )
    return engine.show(
        "Daily Task Log Reminder",
        message,
        type=NotificationType.DAILY_TASK_REMINDER,
        priority=Priority.LOW,
        url="/dashboard?tab=daily-tasks",
    )
