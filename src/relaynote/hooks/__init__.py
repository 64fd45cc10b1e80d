"""Outbound event hooks for relaynote.

Public API::

    from relaynote.hooks import Hook, HookRegistry, KNOWN_EVENTS

    class MyHook(Hook):
        def on_notification_clicked(self, ctx: dict) -> None:
            ...
"""

from relaynote.hooks.base import Hook
from relaynote.hooks.events import KNOWN_EVENTS
from relaynote.hooks.registry import HookRegistry

__all__ = ["KNOWN_EVENTS", "Hook", "HookRegistry"]
