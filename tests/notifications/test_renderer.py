"""Tests for the aggregate copy renderer."""

from __future__ import annotations

from relaynote.core.types import NotificationType
from relaynote.notifications import BatchRenderer


class TestBatchRenderer:
    def test_type_specific_templates(self):
        title, message = BatchRenderer().render(NotificationType.DEADLINE_APPROACHING, 3)
        assert title == "3 Deadline Reminders"
        assert message == "3 tasks have approaching deadlines"

    def test_task_assigned(self):
        title, _ = BatchRenderer().render(NotificationType.TASK_ASSIGNED, 2)
        assert title == "2 New Tasks Assigned"

    def test_fallback_to_default(self):
        title, message = BatchRenderer().render(NotificationType.SYSTEM_UPDATE, 4)
        assert title == "4 New Notifications"
        assert message == "You have 4 new notifications"

    def test_user_templates_override_builtin(self, tmp_path):
        (tmp_path / "task_assigned_title.txt").write_text(
            "{{ count }} jobs for you\n", encoding="utf-8"
        )
        title, message = BatchRenderer(str(tmp_path)).render(NotificationType.TASK_ASSIGNED, 5)
        assert title == "5 jobs for you"
        assert message == "You have 5 new tasks waiting for you"
