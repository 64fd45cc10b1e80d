"""In-memory platform implementations.

:class:`MemorySink` records every display and lets callers simulate the
user (click, dismiss, action buttons) and the platform (permission
changes, display failures).  Used by the test-suite and by hosts that
render notifications themselves from :attr:`MemorySink.displayed`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from relaynote.core.errors import DisplayError, PermissionDeniedError
from relaynote.core.types import PermissionState
from relaynote.platform.base import ConnectivitySource, NotificationHandle, NotificationSink

if TYPE_CHECKING:
    from collections.abc import Callable

    from relaynote.platform.base import DisplayOptions

log = logging.getLogger(__name__)


class MemoryHandle(NotificationHandle):
    """Handle whose events are triggered programmatically."""

    def __init__(self, title: str, options: DisplayOptions) -> None:
        super().__init__()
        self.title = title
        self.options = options

    def click(self) -> None:
        if self.on_click is not None:
            self.on_click()

    def dismiss(self) -> None:
        self.close()

    def act(self, action: str) -> None:
        if self.on_action is not None:
            self.on_action(action)

    def fail(self, exc: Exception | None = None) -> None:
        if self.on_error is not None:
            self.on_error(exc or DisplayError("platform error"))


@dataclass(frozen=True)
class Displayed:
    title: str
    options: DisplayOptions
    handle: MemoryHandle | None


class MemorySink(NotificationSink):
    """Recording sink with failure injection.

    Parameters
    ----------
    permission:
        Initial permission state.
    grant_on_request:
        Permission state returned by :meth:`request_permission`.
    supported:
        Whether the simulated host has a notification surface.
    vibration:
        Whether the simulated host can vibrate.

    """

    def __init__(
        self,
        permission: PermissionState = PermissionState.GRANTED,
        *,
        grant_on_request: PermissionState = PermissionState.GRANTED,
        supported: bool = True,
        vibration: bool = True,
    ) -> None:
        self._permission = permission
        self._grant_on_request = grant_on_request
        self._supported = supported
        self._vibration = vibration
        self._failures: list[Exception] = []
        self.displayed: list[Displayed] = []
        self.attempts = 0
        self.permission_requests = 0
        self.sounds: list[tuple[str, float]] = []
        self.vibrations: list[tuple[int, ...]] = []
        self.focused = 0
        self.navigations: list[str] = []

    # -- capabilities -------------------------------------------------------

    @property
    def supported(self) -> bool:
        return self._supported

    @property
    def supports_vibration(self) -> bool:
        return self._vibration

    def permission(self) -> PermissionState:
        return self._permission

    def set_permission(self, state: PermissionState) -> None:
        self._permission = state

    def request_permission(self) -> PermissionState:
        self.permission_requests += 1
        self._permission = self._grant_on_request
        return self._permission

    # -- failure injection --------------------------------------------------

    def fail_next(self, count: int = 1, exc: Exception | None = None) -> None:
        """Make the next *count* :meth:`display` calls raise."""
        for _ in range(count):
            self._failures.append(exc or DisplayError("simulated display failure"))

    # -- display ------------------------------------------------------------

    def display(self, title: str, options: DisplayOptions) -> MemoryHandle | None:
        self.attempts += 1
        if self._failures:
            raise self._failures.pop(0)
        if self._permission != PermissionState.GRANTED:
            raise PermissionDeniedError
        handle = None if options.persistent else MemoryHandle(title, options)
        self.displayed.append(Displayed(title, options, handle))
        return handle

    def play_sound(self, src: str, volume: float) -> None:
        self.sounds.append((src, volume))

    def vibrate(self, pattern: tuple[int, ...]) -> None:
        self.vibrations.append(tuple(pattern))

    def focus(self) -> None:
        self.focused += 1

    def navigate(self, url: str) -> None:
        self.navigations.append(url)

    # -- inspection ---------------------------------------------------------

    @property
    def titles(self) -> list[str]:
        return [d.title for d in self.displayed]

    def last(self) -> Displayed:
        return self.displayed[-1]


class ManualConnectivity(ConnectivitySource):
    """Connectivity flag flipped by :meth:`set_online`."""

    def __init__(self, online: bool = True) -> None:
        self._online = online
        self._listeners: list[Callable[[bool], None]] = []

    def is_online(self) -> bool:
        return self._online

    def subscribe(self, listener: Callable[[bool], None]) -> None:
        self._listeners.append(listener)

    def set_online(self, online: bool) -> None:
        self._online = online
        for listener in list(self._listeners):
            try:
                listener(online)
            except Exception:
                log.exception("Connectivity listener %r raised", listener)
