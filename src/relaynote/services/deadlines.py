"""Escalating deadline reminders.

For each task, reminders are scheduled 24 hours, 3 hours, 1 hour and
15 minutes before its deadline.  Points already in the past are
skipped, as are finished tasks and tasks whose deadline has passed.
Scheduling a task again replaces its previous reminders.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from relaynote.services.builders import show_deadline_approaching

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from relaynote.core.scheduler import Scheduler, TimerHandle
    from relaynote.services.engine import NotificationEngine

log = logging.getLogger(__name__)

REMINDER_POINTS: tuple[tuple[float, str], ...] = (
    (24, "24 hours"),
    (3, "3 hours"),
    (1, "1 hour"),
    (0.25, "15 minutes"),
)

DONE_STATUSES = frozenset({"done", "completed"})


@dataclass
class _Reminder:
    hours: float
    label: str
    timer: TimerHandle


def _parse_deadline(value: datetime | str) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


class DeadlineScheduler:
    """Schedules deadline reminders through a :class:`NotificationEngine`."""

    def __init__(self, engine: NotificationEngine, scheduler: Scheduler) -> None:
        self._engine = engine
        self._scheduler = scheduler
        self._reminders: dict[str, list[_Reminder]] = {}

    @property
    def scheduled_count(self) -> int:
        """Number of tasks with at least one pending reminder."""
        return len(self._reminders)

    def reminders_for(self, task_key: str) -> list[str]:
        """Labels of the pending reminders for *task_key*."""
        return [r.label for r in self._reminders.get(task_key, [])]

    def schedule(
        self,
        task: str,
        deadline: datetime | str,
        *,
        task_id: str | None = None,
        status: str | None = None,
    ) -> int:
        """Schedule the reminders for one task.  Returns how many were armed.

        Any reminders already armed for the task are cancelled first, so
        marking a task done or moving its deadline into the past silences it.
        """
        key = task_id or task
        self.clear(key)

        if status is not None and status.lower() in DONE_STATUSES:
            return 0
        due = _parse_deadline(deadline)
        now = self._scheduler.now()
        if due <= now:
            return 0

        reminders = []
        for hours, label in REMINDER_POINTS:
            delay = due - timedelta(hours=hours) - now
            if delay <= timedelta(0):
                continue
            timer = self._scheduler.after(
                delay.total_seconds() * 1000,
                lambda h=hours, lb=label: self._fire(key, task, due, task_id, h, lb),
            )
            reminders.append(_Reminder(hours, label, timer))

        if reminders:
            self._reminders[key] = reminders
            log.debug(
                "Scheduled %d deadline reminder(s) for %s",
                len(reminders),
                key,
                extra={"task_key": key, "deadline": due.isoformat()},
            )
        return len(reminders)

    def schedule_many(self, tasks: Iterable[Mapping[str, Any]]) -> int:
        """Schedule reminders for task mappings (``id``, ``task``, ``deadline``, ``status``)."""
        total = 0
        for item in tasks:
            if not item.get("deadline") or not item.get("task"):
                continue
            total += self.schedule(
                item["task"],
                item["deadline"],
                task_id=item.get("id"),
                status=item.get("status"),
            )
        return total

    def _fire(
        self,
        key: str,
        task: str,
        due: datetime,
        task_id: str | None,
        hours: float,
        label: str,
    ) -> None:
        pending = self._reminders.get(key, [])
        pending[:] = [r for r in pending if r.label != label]
        if not pending:
            self._reminders.pop(key, None)
        log.info("Deadline reminder (%s) for %s", label, key, extra={"task_key": key})
        show_deadline_approaching(
            self._engine,
            task=task,
            hours_remaining=hours,
            task_id=task_id,
            deadline=due.isoformat(),
        )

    def clear(self, task_key: str) -> None:
        for reminder in self._reminders.pop(task_key, []):
            reminder.timer.cancel()

    def clear_all(self) -> None:
        for reminders in self._reminders.values():
            for reminder in reminders:
                reminder.timer.cancel()
        self._reminders.clear()
