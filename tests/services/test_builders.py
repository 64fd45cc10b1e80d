"""Tests for the business-event convenience builders."""

from __future__ import annotations

import pytest

from relaynote.core.types import Priority
from relaynote.services.builders import (
    format_time_remaining,
    show_attendance_reminder,
    show_daily_task_reminder,
    show_deadline_approaching,
    show_task_assigned,
    show_task_completed,
)


@pytest.mark.parametrize(
    ("hours", "text"),
    [
        (0.25, "right now"),
        (0.5, "in 30 minutes"),
        (0.75, "in 45 minutes"),
        (1, "in 1 hour"),
        (2.5, "in 3 hours"),
        (23.4, "in 23 hours"),
        (24, "in 1 day"),
        (36, "in 2 days"),
    ],
)
def test_format_time_remaining(hours, text):
    assert format_time_remaining(hours) == text


class TestBuilders:
    @pytest.fixture()
    def direct(self, engine):
        engine.update_setting("batchingEnabled", False)
        return engine

    def test_task_assigned(self, direct, sink):
        show_task_assigned(direct, task="Write docs", assigned_by="Sam", task_id="17")
        shown = sink.last()
        assert shown.title == "New Task Assigned"
        assert shown.options.body == 'Sam assigned you: "Write docs"'
        assert shown.options.data["url"] == "/dashboard?tab=my-tasks&taskId=17"
        assert shown.options.data["assignedBy"] == "Sam"
        assert [a["action"] for a in shown.options.actions] == ["view", "mark-done"]

    def test_task_assigned_batches_by_default(self, engine):
        result = show_task_assigned(engine, task="x", assigned_by="y")
        assert result.batched

    def test_task_completed(self, direct, sink):
        show_task_completed(direct, task="Deploy", completed_by="Kim", task_id="3")
        assert sink.last().title == "Task Completed"
        assert sink.last().options.body == 'Kim completed: "Deploy"'

    @pytest.mark.parametrize(
        ("hours", "title", "tag", "require_interaction"),
        [
            (0.5, "URGENT: Deadline NOW!", "deadline_critical", True),
            (1, "URGENT: Deadline NOW!", "deadline_critical", True),
            (3, "Deadline Approaching", "deadline_approaching", False),
            (12, "Deadline Reminder", "deadline_approaching", False),
        ],
    )
    def test_deadline_escalation(self, direct, sink, hours, title, tag, require_interaction):
        show_deadline_approaching(direct, task="Report", hours_remaining=hours, task_id="9")
        shown = sink.last()
        assert shown.title == title
        assert shown.options.tag == tag
        assert shown.options.require_interaction is require_interaction

    def test_deadline_priority(self, engine):
        n_critical = engine.build("x", "y", type="deadline_critical")
        assert n_critical.priority is Priority.CRITICAL

    def test_attendance_reminder(self, direct, sink):
        show_attendance_reminder(direct)
        assert sink.last().title == "Don't Forget to Clock In"
        assert sink.last().options.data["url"] == "/dashboard?tab=attendance"

    @pytest.mark.parametrize(
        ("count", "message"),
        [
            (0, "Don't forget to log your daily tasks"),
            (4, "You have 4 incomplete daily tasks"),
        ],
    )
    def test_daily_task_reminder(self, direct, sink, count, message):
        show_daily_task_reminder(direct, task_count=count)
        assert sink.last().options.body == message
