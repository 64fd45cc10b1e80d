"""Batching engine.

Low and medium priority notifications of the same type are grouped
under the key ``<type>_<level>``.  Every addition re-arms the batch's
flush timer (debounce), so a burst is flushed once, after input stops.

On flush the batch is removed from the registry *before* anything is
delivered, so a batch can only ever be flushed once.  A single member
is delivered unchanged; two or more collapse into one silent aggregate
whose ``data.batchedNotifications`` lists the member ids in arrival
order.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from relaynote.core.registry import batch_url
from relaynote.core.types import NotificationState, Priority
from relaynote.models.notification import Batch, Notification, generate_id
from relaynote.models.result import ShowResult
from relaynote.notifications.renderer import BatchRenderer

if TYPE_CHECKING:
    from collections.abc import Callable

    from relaynote.config.settings import EngineSettings
    from relaynote.core.scheduler import Scheduler
    from relaynote.services.settings_store import SettingsStore

log = logging.getLogger(__name__)


class BatchingEngine:
    """Owns the batch registry and its flush timers."""

    def __init__(
        self,
        scheduler: Scheduler,
        settings: SettingsStore,
        deliver: Callable[[Notification], ShowResult],
        engine_settings: EngineSettings,
        renderer: BatchRenderer | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._settings = settings
        self._deliver = deliver
        self._engine_settings = engine_settings
        self._renderer = renderer or BatchRenderer(engine_settings.templates_path)
        self._batches: dict[str, Batch] = {}

    def __len__(self) -> int:
        """Number of notifications waiting in all batches."""
        return sum(len(b.members) for b in self._batches.values())

    def pending_keys(self) -> list[str]:
        return list(self._batches)

    # -- policy ------------------------------------------------------------

    def should_batch(self, notification: Notification) -> bool:
        return (
            self._settings.settings.batching_enabled
            and notification.priority <= Priority.MEDIUM
            and not notification.require_interaction
            and not notification.persistent
        )

    def delay_for(self, notification: Notification) -> int:
        """Flush delay in ms for a batch whose latest member is *notification*."""
        if (
            notification.priority >= Priority.HIGH
            or notification.type in self._engine_settings.fast_batch_types
        ):
            return self._engine_settings.fast_batch_delay_ms
        return self._engine_settings.batch_delay_ms

    # -- batching ----------------------------------------------------------

    def add(self, notification: Notification) -> ShowResult:
        key = Batch.key_for(notification)
        batch = self._batches.get(key)
        if batch is None:
            batch = Batch(key=key)
            self._batches[key] = batch

        notification.advance(NotificationState.BATCHED, reason=key)
        batch.members.append(notification)

        if batch.timer is not None:
            batch.timer.cancel()
        delay = self.delay_for(notification)
        batch.timer = self._scheduler.after(delay, lambda: self.flush(key))

        log.debug(
            "Batched into %s (%d pending, flush in %d ms)",
            key,
            len(batch.members),
            delay,
            extra={"notification_id": notification.id, "notification_type": notification.type.value},
        )
        return ShowResult(success=True, batched=True, notification_id=notification.id)

    def flush(self, key: str) -> ShowResult | None:
        """Deliver the batch under *key*.  ``None`` if there is none."""
        batch = self._batches.pop(key, None)
        if batch is None:
            return None
        if batch.timer is not None:
            batch.timer.cancel()
            batch.timer = None
        if not batch.members:
            return None

        if len(batch.members) == 1:
            return self._deliver(batch.members[0])

        aggregate = self._collapse(batch.members)
        log.info(
            "Collapsed %d notifications into %s",
            len(batch.members),
            aggregate.id,
            extra={"notification_id": aggregate.id, "notification_type": aggregate.type.value},
        )
        return self._deliver(aggregate)

    def _collapse(self, members: list[Notification]) -> Notification:
        first = members[0]
        title, message = self._renderer.render(first.type, len(members))
        now = self._scheduler.now()
        data = dict(first.data)
        data["batchedNotifications"] = [m.id for m in members]
        data["url"] = batch_url(first.type)
        return Notification(
            id=generate_id(int(now.timestamp() * 1000)),
            title=title,
            message=message,
            type=first.type,
            priority=first.priority,
            data=data,
            actions=first.actions,
            icon=first.icon,
            badge=first.badge,
            timestamp=now.isoformat(),
            persistent=first.persistent,
            silent=True,
            tag=first.tag,
            renotify=first.renotify,
            require_interaction=first.require_interaction,
            sound=None,
            vibrate=None,
        )

    def flush_all(self) -> int:
        """Flush every batch immediately.  Returns how many were flushed."""
        keys = list(self._batches)
        for key in keys:
            self.flush(key)
        return len(keys)

    def cancel_all(self) -> None:
        """Drop every batch without delivering."""
        for batch in self._batches.values():
            if batch.timer is not None:
                batch.timer.cancel()
        self._batches.clear()
