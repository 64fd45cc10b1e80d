"""Host platform capabilities consumed by the delivery engine.

The engine never touches a real notification surface directly.  Hosts
provide a :class:`NotificationSink` (display, permission, sound,
vibration, focus/navigation) and a :class:`ConnectivitySource`
(online/offline signal).  Only :meth:`NotificationSink.display` is
mandatory; the other capabilities default to no-ops.

Usage::

    from relaynote.platform import NotificationSink

    class DesktopSink(NotificationSink):
        def display(self, title, options):
            handle = NotificationHandle()
            show_on_desktop(title, options.body)
            return handle
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from relaynote.core.types import PermissionState

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplayOptions:
    """Options bag handed to :meth:`NotificationSink.display`."""

    body: str
    icon: str | None = None
    badge: str | None = None
    tag: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    require_interaction: bool = False
    silent: bool = False
    renotify: bool = False
    actions: tuple[dict[str, Any], ...] = ()
    timestamp: int = 0
    persistent: bool = False


class NotificationHandle:
    """A displayed notification, as seen by the engine.

    Sinks call the ``on_*`` slots when the platform reports a user or
    platform event.  The engine fills the slots right after
    :meth:`NotificationSink.display` returns.
    """

    def __init__(self) -> None:
        self.on_click: Callable[[], None] | None = None
        self.on_close: Callable[[], None] | None = None
        self.on_error: Callable[[Exception], None] | None = None
        self.on_action: Callable[[str], None] | None = None
        self.closed = False

    def close(self) -> None:
        """Close the notification; fires ``on_close`` once."""
        if self.closed:
            return
        self.closed = True
        if self.on_close is not None:
            self.on_close()


class NotificationSink(abc.ABC):
    """Base class for host notification surfaces."""

    @property
    def supported(self) -> bool:
        """Whether the host has a notification surface at all."""
        return True

    @property
    def supports_vibration(self) -> bool:
        return False

    def permission(self) -> PermissionState:
        """Current permission state."""
        return PermissionState.GRANTED

    def request_permission(self) -> PermissionState:
        """Ask the host (and usually the user) for permission."""
        return self.permission()

    @abc.abstractmethod
    def display(self, title: str, options: DisplayOptions) -> NotificationHandle | None:
        """Display a notification.

        Returns a handle for event wiring, or ``None`` when the platform
        gives no per-notification callbacks (e.g. persistent
        notifications owned by a background worker).

        Raises
        ------
        Exception
            Any exception is treated as a transient display failure
            unless it is a :class:`~relaynote.core.errors.DisplayError`
            with ``retryable=False``.

        """

    def play_sound(self, src: str, volume: float) -> None:  # noqa: B027
        """Play a notification sound."""

    def vibrate(self, pattern: tuple[int, ...]) -> None:  # noqa: B027
        """Trigger a vibration pattern (milliseconds on/off)."""

    def focus(self) -> None:  # noqa: B027
        """Bring the application to the foreground."""

    def navigate(self, url: str) -> None:  # noqa: B027
        """Navigate the application to *url*."""


class ConnectivitySource(abc.ABC):
    """Reports the host's online state and its transitions."""

    @abc.abstractmethod
    def is_online(self) -> bool:
        """Current connectivity."""

    @abc.abstractmethod
    def subscribe(self, listener: Callable[[bool], None]) -> None:
        """Register *listener* to be called with the new state on change."""
