"""Offline queue and connection monitor.

The queue holds notifications that could not be attempted, either
because the host is offline or because notification permission is
missing.  Both share one FIFO; only the returned reason tells them
apart.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from relaynote.core.types import NotificationState

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from relaynote.models.notification import Notification
    from relaynote.platform.base import ConnectivitySource

log = logging.getLogger(__name__)


class OfflineQueue:
    """FIFO of notifications awaiting connectivity or permission."""

    def __init__(self) -> None:
        self._items: deque[Notification] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Notification]:
        return iter(list(self._items))

    def push(self, notification: Notification, *, reason: str | None = None) -> None:
        notification.advance(NotificationState.QUEUED, reason=reason)
        self._items.append(notification)
        log.debug(
            "Queued notification (%d waiting)",
            len(self._items),
            extra={"notification_id": notification.id, "reason": reason},
        )

    def drain(self) -> list[Notification]:
        """Remove and return every queued notification in insertion order."""
        items = list(self._items)
        self._items.clear()
        return items

    def clear(self) -> None:
        self._items.clear()


class ConnectionMonitor:
    """Tracks the online flag and reports real transitions only.

    Parameters
    ----------
    source:
        Connectivity source; ``None`` means always online.
    on_change:
        Called with the new state after the flag flips.

    """

    def __init__(
        self,
        source: ConnectivitySource | None,
        on_change: Callable[[bool], None],
    ) -> None:
        self._source = source
        self._on_change = on_change
        self._online = source.is_online() if source is not None else True
        self._active = True
        if source is not None:
            source.subscribe(self._handle)

    @property
    def online(self) -> bool:
        return self._online

    def _handle(self, online: bool) -> None:
        if not self._active or online == self._online:
            return
        self._online = online
        log.info("Connectivity changed: %s", "online" if online else "offline")
        self._on_change(online)

    def stop(self) -> None:
        """Ignore further transitions (teardown)."""
        self._active = False
