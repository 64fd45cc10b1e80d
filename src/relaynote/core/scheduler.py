"""Timer abstraction for batch flushes, retry backoff and cleanup.

Every suspension point in the engine goes through a :class:`Scheduler`
instead of ambient timer primitives.  Two implementations ship:

- :class:`AsyncioScheduler`: production; timers run on the host's
  single event loop via ``loop.call_later``.
- :class:`ManualScheduler`: a fake clock for tests and simulations;
  nothing fires until :meth:`ManualScheduler.advance` is called.

Usage::

    scheduler = ManualScheduler()
    handle = scheduler.after(5000, flush)
    scheduler.advance(5000)   # flush() runs here
"""

from __future__ import annotations

import abc
import asyncio
import heapq
import itertools
import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)


class TimerHandle:
    """Cancellation token returned by :meth:`Scheduler.after`."""

    __slots__ = ("_cancel", "cancelled", "due")

    def __init__(self, due: datetime, cancel: Callable[[], None] | None = None) -> None:
        self.due = due
        self.cancelled = False
        self._cancel = cancel

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self._cancel is not None:
            self._cancel()


class Scheduler(abc.ABC):
    """Base class for timer backends."""

    @abc.abstractmethod
    def now(self) -> datetime:
        """Current time as an aware UTC datetime."""

    @abc.abstractmethod
    def after(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* once after *delay_ms* milliseconds."""


# ---------------------------------------------------------------------------
# asyncio
# ---------------------------------------------------------------------------


class AsyncioScheduler(Scheduler):
    """Schedules callbacks on an asyncio event loop.

    Parameters
    ----------
    loop:
        The loop to schedule on.  Defaults to the running loop at the
        time of the first :meth:`after` call.

    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def now(self) -> datetime:
        return datetime.now(UTC)

    def after(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        timer = loop.call_later(max(delay_ms, 0) / 1000.0, self._run, callback)
        return TimerHandle(self.now() + timedelta(milliseconds=delay_ms), timer.cancel)

    @staticmethod
    def _run(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            log.exception("Scheduled callback %r raised", callback)


# ---------------------------------------------------------------------------
# Fake clock
# ---------------------------------------------------------------------------


class ManualScheduler(Scheduler):
    """Deterministic scheduler driven by :meth:`advance`.

    Callbacks fire in due-time order; ties fire in scheduling order.
    Callbacks scheduled by a firing callback run in the same
    :meth:`advance` call if they fall due within the window.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
        self._queue: list[tuple[datetime, int, TimerHandle, Callable[[], None]]] = []
        self._seq = itertools.count()

    def now(self) -> datetime:
        return self._now

    def after(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        due = self._now + timedelta(milliseconds=max(delay_ms, 0))
        handle = TimerHandle(due)
        heapq.heappush(self._queue, (due, next(self._seq), handle, callback))
        return handle

    @property
    def pending(self) -> int:
        """Number of timers that have neither fired nor been cancelled."""
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def advance(self, ms: float) -> int:
        """Move the clock forward by *ms*, firing due callbacks.

        Returns the number of callbacks that ran.
        """
        return self._advance_to(self._now + timedelta(milliseconds=ms))

    def _advance_to(self, target: datetime) -> int:
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            handle.cancelled = True
            callback()
            fired += 1
        self._now = target
        return fired

    def set_time(self, when: datetime) -> None:
        """Jump the wall clock without firing timers (quiet-hours tests)."""
        shift = when - self._now
        self._now = when
        self._queue = [(due + shift, seq, h, cb) for due, seq, h, cb in self._queue]
        for due, _, handle, _ in self._queue:
            handle.due = due
        heapq.heapify(self._queue)

    def run_all(self, limit: int = 10_000) -> int:
        """Fire every pending timer, advancing the clock as needed."""
        fired = 0
        while fired < limit:
            live = [entry for entry in self._queue if not entry[2].cancelled]
            if not live:
                break
            due = min(entry[0] for entry in live)
            fired += self._advance_to(due)
        return fired
