"""Retry engine: bounded exponential backoff after display failures.

For a notification whose current attempt count is ``a``:

- ``a < max_retries``: retry after ``base_delay_ms * 2**a`` (1s, 2s,
  4s with the defaults) and store ``a + 1``;
- otherwise: drop the retry record and file a :class:`FailedEntry`.
  Failed entries are never retried automatically.

A retry that succeeds, or that ends up parked in the offline queue,
clears the record.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from relaynote.core.types import NotificationState
from relaynote.models.notification import FailedEntry, Notification, RetryRecord

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from relaynote.core.scheduler import Scheduler, TimerHandle
    from relaynote.models.result import ShowResult
    from relaynote.services.analytics import AnalyticsRecorder

log = logging.getLogger(__name__)


def _describe(error: BaseException | str) -> str:
    if isinstance(error, str):
        return error
    return str(error) or type(error).__name__


class RetryEngine:
    """Tracks retry records, backoff timers and permanently failed entries.

    Parameters
    ----------
    scheduler:
        Timer backend for the backoff delays.
    analytics:
        ``retried`` is incremented each time a retry fires.
    deliver:
        Called with the notification when a retry fires.
    max_retries:
        Retries allowed per notification before it is filed as failed.
    base_delay_ms:
        Delay before the first retry; doubled for each later one.
    on_failed:
        Called with every new :class:`FailedEntry`.

    """

    def __init__(
        self,
        scheduler: Scheduler,
        analytics: AnalyticsRecorder,
        deliver: Callable[[Notification], ShowResult],
        *,
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        on_failed: Callable[[FailedEntry], None] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._analytics = analytics
        self._deliver = deliver
        self._max_retries = max_retries
        self._base_delay_ms = base_delay_ms
        self._on_failed = on_failed
        self._records: dict[str, RetryRecord] = {}
        self._timers: dict[str, TimerHandle] = {}
        self._failed: list[FailedEntry] = []

    # -- inspection --------------------------------------------------------

    def attempts(self, notification_id: str) -> int:
        record = self._records.get(notification_id)
        return record.attempts if record else 0

    def failed_entries(self) -> list[FailedEntry]:
        return list(self._failed)

    def delay_for(self, attempts: int) -> int:
        return self._base_delay_ms * 2**attempts

    # -- scheduling --------------------------------------------------------

    def schedule(self, notification: Notification, error: BaseException | str) -> bool:
        """Schedule another attempt or file the notification as failed.

        Returns ``True`` if a retry was scheduled.
        """
        record = self._records.get(notification.id)
        attempts = record.attempts if record else 0

        if attempts >= self._max_retries:
            self._records.pop(notification.id, None)
            log.error(
                "Max retries exceeded for notification '%s'",
                notification.title,
                extra={"notification_id": notification.id, "attempts": attempts},
            )
            self.fail(notification, error)
            return False

        if record is None:
            record = RetryRecord(notification.id, 0, self._scheduler.now())
            self._records[notification.id] = record
        record.attempts = attempts + 1
        notification.attempts = record.attempts
        notification.advance(NotificationState.RETRYING, reason=_describe(error))

        delay = self.delay_for(attempts)
        previous = self._timers.pop(notification.id, None)
        if previous is not None:
            previous.cancel()
        self._timers[notification.id] = self._scheduler.after(
            delay, lambda: self._fire(notification)
        )
        log.info(
            "Retrying notification '%s' in %d ms (attempt %d/%d)",
            notification.title,
            delay,
            record.attempts,
            self._max_retries,
            extra={"notification_id": notification.id, "attempts": record.attempts},
        )
        return True

    def _fire(self, notification: Notification) -> None:
        self._timers.pop(notification.id, None)
        self._analytics.increment("retried")
        result = self._deliver(notification)
        if result.success or notification.state is NotificationState.QUEUED:
            self._records.pop(notification.id, None)

    def fail(self, notification: Notification, error: BaseException | str) -> FailedEntry:
        """File *notification* as permanently failed."""
        self._records.pop(notification.id, None)
        timer = self._timers.pop(notification.id, None)
        if timer is not None:
            timer.cancel()
        notification.advance(NotificationState.FAILED, reason=_describe(error))
        entry = FailedEntry(notification, _describe(error), self._scheduler.now())
        self._failed.append(entry)
        if self._on_failed is not None:
            self._on_failed(entry)
        return entry

    # -- housekeeping ------------------------------------------------------

    def cleanup(self, now: datetime, max_age_ms: int) -> tuple[int, int]:
        """Prune retry records and failed entries older than *max_age_ms*.

        Returns ``(records_removed, entries_removed)``.
        """
        cutoff = now - timedelta(milliseconds=max_age_ms)
        stale = [nid for nid, rec in self._records.items() if rec.created_at < cutoff]
        for nid in stale:
            del self._records[nid]
            timer = self._timers.pop(nid, None)
            if timer is not None:
                timer.cancel()
        before = len(self._failed)
        self._failed = [e for e in self._failed if e.timestamp >= cutoff]
        return len(stale), before - len(self._failed)

    def cancel_all(self) -> None:
        """Cancel pending retries and forget all records and failed entries."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._records.clear()
        self._failed.clear()
