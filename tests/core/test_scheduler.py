"""Tests for the timer backends."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

from relaynote.core.scheduler import AsyncioScheduler, ManualScheduler


class TestManualScheduler:
    def test_nothing_fires_before_due(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.after(1000, lambda: fired.append(1))
        scheduler.advance(999)
        assert fired == []
        scheduler.advance(1)
        assert fired == [1]

    def test_fires_in_due_order_then_schedule_order(self):
        scheduler = ManualScheduler()
        order = []
        scheduler.after(200, lambda: order.append("b"))
        scheduler.after(100, lambda: order.append("a"))
        scheduler.after(200, lambda: order.append("c"))
        assert scheduler.advance(500) == 3
        assert order == ["a", "b", "c"]

    def test_clock_is_at_due_time_inside_callback(self):
        start = datetime(2025, 1, 1, tzinfo=UTC)
        scheduler = ManualScheduler(start)
        seen = []
        scheduler.after(1500, lambda: seen.append(scheduler.now()))
        scheduler.advance(5000)
        assert seen == [start + timedelta(milliseconds=1500)]
        assert scheduler.now() == start + timedelta(seconds=5)

    def test_cancelled_timer_does_not_fire(self):
        scheduler = ManualScheduler()
        fired = []
        handle = scheduler.after(10, lambda: fired.append(1))
        handle.cancel()
        assert scheduler.pending == 0
        scheduler.advance(100)
        assert fired == []

    def test_chained_timers_fire_within_window(self):
        scheduler = ManualScheduler()
        fired = []

        def first():
            fired.append("first")
            scheduler.after(100, lambda: fired.append("second"))

        scheduler.after(100, first)
        scheduler.advance(250)
        assert fired == ["first", "second"]

    def test_run_all(self):
        scheduler = ManualScheduler()
        scheduler.after(10, lambda: None)
        scheduler.after(10_000, lambda: None)
        assert scheduler.run_all() == 2
        assert scheduler.pending == 0

    def test_set_time_shifts_pending_timers(self):
        scheduler = ManualScheduler()
        handle = scheduler.after(1000, lambda: None)
        target = scheduler.now() + timedelta(hours=3)
        scheduler.set_time(target)
        assert handle.due == target + timedelta(seconds=1)


class TestAsyncioScheduler:
    def test_callback_runs_on_loop(self):
        fired = []

        async def main():
            scheduler = AsyncioScheduler()
            scheduler.after(10, lambda: fired.append("x"))
            await asyncio.sleep(0.05)

        asyncio.run(main())
        assert fired == ["x"]

    def test_cancel(self):
        fired = []

        async def main():
            scheduler = AsyncioScheduler()
            handle = scheduler.after(10, lambda: fired.append("x"))
            handle.cancel()
            await asyncio.sleep(0.05)

        asyncio.run(main())
        assert fired == []

    def test_callback_errors_are_logged_not_raised(self, caplog):
        async def main():
            scheduler = AsyncioScheduler()
            scheduler.after(0, lambda: 1 / 0)
            await asyncio.sleep(0.02)

        asyncio.run(main())
        assert "raised" in caplog.text
