"""Delivery engine: one display attempt against the host sink.

Preconditions are checked in order: connectivity, then permission.
Either one missing parks the notification in the offline queue.  A
display that raises is counted as ``failed`` and handed to the retry
engine; non-retryable :class:`DisplayError` s are filed as failed
straight away.  Sound and vibration problems are logged and never
fail a delivery.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from relaynote.core.errors import DisplayError
from relaynote.core.types import NotificationState, PermissionState
from relaynote.models.result import NO_PERMISSION, OFFLINE, ShowResult
from relaynote.platform.base import DisplayOptions

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from relaynote.models.notification import Notification
    from relaynote.models.settings import NotificationSettings
    from relaynote.platform.base import NotificationHandle, NotificationSink
    from relaynote.services.analytics import AnalyticsRecorder
    from relaynote.services.offline import OfflineQueue
    from relaynote.services.retry import RetryEngine
    from relaynote.services.settings_store import SettingsStore

log = logging.getLogger(__name__)


def _log_extra(notification: Notification, **extra: object) -> dict:
    return {
        "notification_id": notification.id,
        "notification_type": notification.type.value,
        **extra,
    }


class DeliveryEngine:
    """Displays notifications and wires the platform callbacks."""

    def __init__(
        self,
        sink: NotificationSink,
        settings: SettingsStore,
        analytics: AnalyticsRecorder,
        offline_queue: OfflineQueue,
        retry: RetryEngine,
        *,
        is_online: Callable[[], bool],
        emit: Callable[[str, dict], None],
        clock: Callable[[], datetime],
        max_actions: int = 2,
    ) -> None:
        self._sink = sink
        self._settings = settings
        self._analytics = analytics
        self._queue = offline_queue
        self._retry = retry
        self._is_online = is_online
        self._emit = emit
        self._clock = clock
        self._max_actions = max_actions

    def show_immediate(self, notification: Notification) -> ShowResult:
        notification.advance(NotificationState.DELIVERING)

        if not self._is_online():
            self._queue.push(notification, reason=OFFLINE)
            return ShowResult(
                success=False, queued=True, reason=OFFLINE, notification_id=notification.id
            )

        if self._sink.permission() != PermissionState.GRANTED:
            self._queue.push(notification, reason=NO_PERMISSION)
            log.info("No notification permission, queued", extra=_log_extra(notification))
            return ShowResult(success=False, reason=NO_PERMISSION, notification_id=notification.id)

        return self._attempt(notification, retry=True)

    def show_best_effort(self, notification: Notification) -> ShowResult:
        """Display once, ignoring connectivity; never queues or retries.

        Used for the engine's own connection notices, which are stale by
        the time a queue or retry would get to them.
        """
        notification.advance(NotificationState.DELIVERING)
        if self._sink.permission() != PermissionState.GRANTED:
            return ShowResult(success=False, reason=NO_PERMISSION, notification_id=notification.id)
        return self._attempt(notification, retry=False)

    def _attempt(self, notification: Notification, *, retry: bool) -> ShowResult:
        options = self._options(notification)
        try:
            handle = self._sink.display(notification.title, options)
        except Exception as exc:  # noqa: BLE001
            return self._display_failed(notification, exc, retry=retry)

        notification.advance(NotificationState.DELIVERED)
        self._analytics.increment("sent")

        settings = self._settings.settings
        self._play_sound(notification, settings)
        self._vibrate(notification, settings)
        if handle is not None:
            self._wire(handle, notification)

        log.info(
            "Notification shown: %s",
            notification.title,
            extra=_log_extra(notification, priority=notification.priority.level),
        )
        return ShowResult(success=True, notification_id=notification.id)

    # -- helpers -----------------------------------------------------------

    def _options(self, notification: Notification) -> DisplayOptions:
        return DisplayOptions(
            body=notification.message,
            icon=notification.icon,
            badge=notification.badge,
            tag=notification.tag,
            data=dict(notification.data),
            require_interaction=notification.require_interaction,
            silent=notification.silent,
            renotify=notification.renotify,
            actions=tuple(a.to_dict() for a in notification.actions[: self._max_actions]),
            timestamp=int(self._clock().timestamp() * 1000),
            persistent=notification.persistent,
        )

    def _display_failed(
        self, notification: Notification, exc: Exception, *, retry: bool
    ) -> ShowResult:
        self._analytics.increment("failed")
        log.warning(
            "Failed to show notification '%s': %s",
            notification.title,
            exc,
            extra=_log_extra(notification, attempts=notification.attempts),
        )
        if retry and isinstance(exc, DisplayError) and not exc.retryable:
            self._retry.fail(notification, exc)
        elif retry:
            self._retry.schedule(notification, exc)
        return ShowResult(
            success=False,
            error=str(exc) or type(exc).__name__,
            notification_id=notification.id,
        )

    def _play_sound(self, notification: Notification, settings: NotificationSettings) -> None:
        if notification.silent or not settings.sound_enabled or not notification.sound:
            return
        try:
            self._sink.play_sound(notification.sound, notification.priority.volume)
        except Exception as exc:  # noqa: BLE001
            log.warning("Sound playback failed: %s", exc, extra=_log_extra(notification))

    def _vibrate(self, notification: Notification, settings: NotificationSettings) -> None:
        if (
            not notification.vibrate
            or not settings.vibration_enabled
            or not self._sink.supports_vibration
        ):
            return
        try:
            self._sink.vibrate(notification.vibrate)
        except Exception as exc:  # noqa: BLE001
            log.warning("Vibration failed: %s", exc, extra=_log_extra(notification))

    # -- platform callbacks ------------------------------------------------

    def _wire(self, handle: NotificationHandle, notification: Notification) -> None:
        def on_click() -> None:
            if notification.state is not NotificationState.DELIVERED:
                return
            self._analytics.increment("clicked")
            notification.advance(NotificationState.CLICKED)
            self._sink.focus()
            if notification.url:
                self._sink.navigate(notification.url)
            handle.close()
            self._emit("notification.clicked", {"notification": notification.to_dict()})

        def on_close() -> None:
            if notification.state is not NotificationState.DELIVERED:
                return
            self._analytics.increment("dismissed")
            notification.advance(NotificationState.DISMISSED)

        def on_error(exc: Exception) -> None:
            if notification.state is not NotificationState.DELIVERED:
                log.debug(
                    "Ignoring platform error in state %s",
                    notification.state.value,
                    extra=_log_extra(notification),
                )
                return
            log.warning("Notification error: %s", exc, extra=_log_extra(notification))
            self._retry.schedule(notification, exc)

        def on_action(action: str) -> None:
            self._emit(
                "notification.action",
                {"action": action, "data": dict(notification.data)},
            )

        handle.on_click = on_click
        handle.on_close = on_close
        handle.on_error = on_error
        handle.on_action = on_action
