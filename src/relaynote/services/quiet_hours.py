"""Quiet-hours gate.

Times are compared as minutes since local midnight.  Both bounds are
inclusive, and a window whose start is later than its end spans
midnight (``22:00``-``08:00`` covers 23:30 and 02:00 but not 10:00).

Only notifications below HIGH priority are held.  Held notifications
are released in arrival order by a single wake timer armed for the
first minute after the window ends; on wake the gate checks again, so
a window that was widened in the meantime simply re-arms.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from relaynote.core.types import NotificationState, Priority
from relaynote.models.result import QUIET_HOURS
from relaynote.models.settings import NotificationSettings, QuietHours

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime, tzinfo

    from relaynote.core.scheduler import Scheduler, TimerHandle
    from relaynote.models.notification import Notification
    from relaynote.services.settings_store import SettingsStore

log = logging.getLogger(__name__)

_DAY_MINUTES = 24 * 60


def _to_minutes(hhmm: str) -> int:
    hours, _, minutes = hhmm.partition(":")
    return int(hours) * 60 + int(minutes)


def _quiet(settings: NotificationSettings | QuietHours) -> QuietHours:
    return settings.quiet_hours if isinstance(settings, NotificationSettings) else settings


def is_quiet_hour(settings: NotificationSettings | QuietHours, now: datetime) -> bool:
    """Return whether *now* (local wall time) falls in the quiet window."""
    quiet = _quiet(settings)
    if not quiet.enabled:
        return False
    current = now.hour * 60 + now.minute
    start = _to_minutes(quiet.start)
    end = _to_minutes(quiet.end)
    if start <= end:
        return start <= current <= end
    return current >= start or current <= end


def minutes_until_quiet_end(
    settings: NotificationSettings | QuietHours,
    now: datetime,
) -> int | None:
    """Whole minutes from the start of *now*'s minute to the first
    minute after the window.  ``None`` when *now* is not quiet.
    """
    if not is_quiet_hour(settings, now):
        return None
    current = now.hour * 60 + now.minute
    end = _to_minutes(_quiet(settings).end)
    return (end - current) % _DAY_MINUTES + 1


class QuietHoursGate:
    """Holds sub-HIGH notifications while quiet hours are active.

    Parameters
    ----------
    scheduler:
        Timer backend; its clock defines "now".
    settings:
        Store whose current quiet-hours window is consulted.
    on_release:
        Called once per held notification, in arrival order, when the
        window ends.
    timezone:
        IANA zone the window is expressed in.  ``None`` uses the host's
        local zone.

    """

    def __init__(
        self,
        scheduler: Scheduler,
        settings: SettingsStore,
        on_release: Callable[[Notification], None],
        timezone: str | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._settings = settings
        self._on_release = on_release
        self._tz: tzinfo | None = ZoneInfo(timezone) if timezone else None
        self._held: list[Notification] = []
        self._timer: TimerHandle | None = None

    def __len__(self) -> int:
        return len(self._held)

    @property
    def armed(self) -> bool:
        return self._timer is not None

    def local_now(self) -> datetime:
        return self._scheduler.now().astimezone(self._tz)

    def is_quiet(self) -> bool:
        return is_quiet_hour(self._settings.settings, self.local_now())

    def should_defer(self, notification: Notification) -> bool:
        return notification.priority < Priority.HIGH and self.is_quiet()

    def defer(self, notification: Notification) -> None:
        notification.advance(NotificationState.DEFERRED, reason=QUIET_HOURS)
        self._held.append(notification)
        log.info(
            "Notification deferred until quiet hours end (%d held)",
            len(self._held),
            extra={"notification_id": notification.id, "notification_type": notification.type.value},
        )
        if self._timer is None:
            self._arm()

    def _arm(self) -> None:
        now = self.local_now()
        minutes = minutes_until_quiet_end(self._settings.settings, now)
        if minutes is None:
            self.release()
            return
        delay_ms = minutes * 60_000 - (now.second * 1000 + now.microsecond / 1000)
        self._timer = self._scheduler.after(delay_ms, self._wake)
        log.debug("Quiet-hours wake timer armed for %.0f ms", delay_ms)

    def _wake(self) -> None:
        self._timer = None
        if self.is_quiet():
            self._arm()
            return
        self.release()

    def release(self) -> int:
        """Release every held notification now.  Returns how many."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        held, self._held = self._held, []
        if held:
            log.info("Quiet hours over, releasing %d notification(s)", len(held))
        for notification in held:
            try:
                self._on_release(notification)
            except Exception:
                log.exception(
                    "Releasing deferred notification failed",
                    extra={"notification_id": notification.id},
                )
        return len(held)

    def settings_changed(self, settings: NotificationSettings) -> None:
        """Re-evaluate held notifications against new settings."""
        if not self._held:
            return
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if is_quiet_hour(settings, self.local_now()):
            self._arm()
        else:
            self.release()

    def cancel(self) -> None:
        """Drop held notifications and the wake timer (teardown)."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._held.clear()
