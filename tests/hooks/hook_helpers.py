"""Hook classes and settings builders shared by the hook tests."""

from __future__ import annotations

import time

from relaynote.config.settings import HookEntrySettings, HookSettings
from relaynote.hooks.base import Hook

# ---------------------------------------------------------------------------
# Concrete Hook subclasses for testing
# ---------------------------------------------------------------------------


class RecordingHook(Hook):
    """Records every call in ``self.calls``."""

    def __init__(self, config: dict | None = None) -> None:
        super().__init__(config)
        self.calls: list[tuple[str, dict]] = []

    def on_notification_clicked(self, ctx: dict) -> None:
        self.calls.append(("on_notification_clicked", ctx))

    def on_notification_action(self, ctx: dict) -> None:
        self.calls.append(("on_notification_action", ctx))

    def on_notification_failed(self, ctx: dict) -> None:
        self.calls.append(("on_notification_failed", ctx))

    def on_connection_change(self, ctx: dict) -> None:
        self.calls.append(("on_connection_change", ctx))

    def events(self) -> list[str]:
        return [name for name, _ in self.calls]


class FailingHook(Hook):
    """Raises RuntimeError on every event method."""

    def on_notification_clicked(self, ctx: dict) -> None:
        raise RuntimeError("boom")

    def on_notification_action(self, ctx: dict) -> None:
        raise RuntimeError("boom")

    def on_notification_failed(self, ctx: dict) -> None:
        raise RuntimeError("boom")

    def on_connection_change(self, ctx: dict) -> None:
        raise RuntimeError("boom")


class MutatingHook(Hook):
    """Scribbles over its context to prove isolation."""

    def on_notification_action(self, ctx: dict) -> None:
        ctx["data"]["taskId"] = "tampered"
        ctx["action"] = "tampered"


class SlowHook(Hook):
    """Takes longer than any sane warning threshold."""

    def on_connection_change(self, ctx: dict) -> None:
        time.sleep(0.02)


class StrictConfigHook(Hook):
    """Requires a ``channel`` key in its config."""

    @classmethod
    def validate_config(cls, config: dict) -> None:
        if "channel" not in config:
            msg = "channel is required"
            raise ValueError(msg)


class NotAHook:
    pass


# ---------------------------------------------------------------------------
# Settings builders
# ---------------------------------------------------------------------------

FAKE_MODULE = "relaynote_test_hooks"


def make_hook_entry(
    class_path: str = f"{FAKE_MODULE}.RecordingHook",
    *,
    enabled: bool = True,
    events: tuple[str, ...] = (),
    config: dict | None = None,
) -> HookEntrySettings:
    return HookEntrySettings(
        class_path=class_path,
        enabled=enabled,
        events=events,
        config=config or {},
    )


def make_hook_settings(
    registered: tuple[HookEntrySettings, ...] = (),
    warn_after_ms: int = 100,
) -> HookSettings:
    return HookSettings(warn_after_ms=warn_after_ms, registered=registered)
