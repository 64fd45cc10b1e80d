"""Abstract base class for relaynote event hooks.

All custom hooks must inherit from :class:`Hook` and override the
event methods they are interested in.  Unimplemented methods are
no-ops by default.

Usage::

    from relaynote.hooks import Hook

    class OpenTaskHook(Hook):
        def on_notification_action(self, ctx: dict) -> None:
            if ctx["action"] == "mark-done":
                complete_task(ctx["data"]["taskId"])
"""

from __future__ import annotations

import abc


class Hook(abc.ABC):  # noqa: B024
    """Base class for all relaynote event hooks.

    Parameters
    ----------
    config:
        Optional passthrough configuration from the hook entry's
        ``config`` dict in the relaynote config file.

    """

    def __init__(self, config: dict | None = None) -> None:
        self.config = config or {}

    @classmethod
    def validate_config(cls, config: dict) -> None:
        """Validate hook-specific configuration at load time.

        Override in subclasses to reject invalid config before the
        hook is instantiated.  Raise :class:`ValueError` if *config*
        is not acceptable.

        The default implementation is a no-op.
        """

    # -- Notification events ----------------------------------------------

    def on_notification_clicked(self, ctx: dict) -> None:  # noqa: B027
        """Called after the user clicks a displayed notification.

        Context keys: ``notification`` (the full notification as a
        dict, see :meth:`Notification.to_dict`).
        """

    def on_notification_action(self, ctx: dict) -> None:  # noqa: B027
        """Called when the user presses one of the action buttons.

        Context keys: ``action``, ``data``.
        """

    def on_notification_failed(self, ctx: dict) -> None:  # noqa: B027
        """Called when a notification is filed as permanently failed.

        Context keys: ``notification``, ``error``, ``attempts``.
        """

    # -- Connectivity -----------------------------------------------------

    def on_connection_change(self, ctx: dict) -> None:  # noqa: B027
        """Called on every online/offline transition.

        Context keys: ``online``, ``queued`` (offline queue size at
        the time of the transition).
        """
