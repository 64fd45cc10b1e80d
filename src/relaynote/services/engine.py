"""Notification engine facade.

Wires the quiet-hours gate, batching, delivery, retry, offline queue
and analytics together behind :meth:`NotificationEngine.show`.  The
engine is an explicit object; every collaborator (sink, store,
scheduler, connectivity, hooks) is injected so it can be built per
test with fakes.

Control flow of :meth:`NotificationEngine.show`::

    unsupported platform   -> error
    desktop disabled       -> reason "Desktop notifications disabled"
    quiet hours, < HIGH    -> deferred until the window ends (queued)
    offline                -> offline queue (queued)
    batchable              -> batch (batched)
    otherwise              -> show_immediate

``show`` never raises; every failure becomes a :class:`ShowResult`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from relaynote.config.settings import default_engine_settings
from relaynote.core.errors import PlatformUnsupportedError
from relaynote.core.registry import DEFAULT_BADGE, default_icon, default_priority
from relaynote.core.types import NotificationType, PermissionState, Priority
from relaynote.hooks.registry import HookRegistry
from relaynote.models.notification import Notification, NotificationAction, generate_id
from relaynote.models.result import DESKTOP_DISABLED, OFFLINE, QUIET_HOURS, UNSUPPORTED, ShowResult
from relaynote.models.settings import NotificationSettings
from relaynote.services.analytics import AnalyticsRecorder
from relaynote.services.batching import BatchingEngine
from relaynote.services.delivery import DeliveryEngine
from relaynote.services.offline import ConnectionMonitor, OfflineQueue
from relaynote.services.quiet_hours import QuietHoursGate
from relaynote.services.retry import RetryEngine
from relaynote.services.settings_store import SettingsStore

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from relaynote.config.settings import EngineSettings, RelaynoteSettings
    from relaynote.core.scheduler import Scheduler, TimerHandle
    from relaynote.models.notification import FailedEntry
    from relaynote.notifications.renderer import BatchRenderer
    from relaynote.platform.base import ConnectivitySource, NotificationSink
    from relaynote.storage.base import KeyValueStore

log = logging.getLogger(__name__)

WELCOME_TITLE = "Notifications Enabled!"
WELCOME_MESSAGE = "You'll now receive real-time updates about your tasks and activities."
CONNECTION_LOST_TITLE = "Connection Lost"
CONNECTION_LOST_MESSAGE = "You're offline. Notifications will be queued."
CONNECTION_RESTORED_TITLE = "Connection Restored"
CONNECTION_RESTORED_MESSAGE = "You're back online. Syncing notifications..."


class NotificationEngine:
    """Reliable notification delivery on a single event loop.

    Parameters
    ----------
    sink:
        Host notification surface.
    store:
        Key-value backend for the settings and analytics blobs.
    scheduler:
        Timer backend (:class:`AsyncioScheduler` in production,
        :class:`ManualScheduler` in tests).
    connectivity:
        Online/offline source.  ``None`` means always online.
    settings:
        Engine tuning; defaults apply when omitted.
    hooks:
        Outbound event registry.  An empty one is created when omitted.
    renderer:
        Aggregate copy renderer for batches.
    defaults:
        User settings used when nothing valid is stored.
    settings_key, analytics_key:
        Storage keys of the two persisted blobs.

    """

    def __init__(
        self,
        sink: NotificationSink,
        store: KeyValueStore,
        scheduler: Scheduler,
        connectivity: ConnectivitySource | None = None,
        settings: EngineSettings | None = None,
        hooks: HookRegistry | None = None,
        renderer: BatchRenderer | None = None,
        *,
        defaults: NotificationSettings | None = None,
        settings_key: str = "notification_settings",
        analytics_key: str = "notification_analytics",
    ) -> None:
        self._sink = sink
        self._scheduler = scheduler
        self._config = settings or default_engine_settings()
        self._owns_hooks = hooks is None
        self._hooks = hooks if hooks is not None else HookRegistry()
        self._destroyed = False

        self._settings = SettingsStore(store, settings_key, defaults)
        self._analytics = AnalyticsRecorder(store, analytics_key)
        self._queue = OfflineQueue()
        self._retry = RetryEngine(
            scheduler,
            self._analytics,
            self.show_immediate,
            max_retries=self._config.max_retries,
            base_delay_ms=self._config.retry_base_delay_ms,
            on_failed=self._on_failed,
        )
        self._monitor = ConnectionMonitor(connectivity, self._on_connection_change)
        self._delivery = DeliveryEngine(
            sink,
            self._settings,
            self._analytics,
            self._queue,
            self._retry,
            is_online=lambda: self._monitor.online,
            emit=self._emit,
            clock=scheduler.now,
            max_actions=self._config.max_actions,
        )
        self._batching = BatchingEngine(
            scheduler,
            self._settings,
            self.show_immediate,
            self._config,
            renderer,
        )
        self._quiet = QuietHoursGate(
            scheduler,
            self._settings,
            self._release_deferred,
            timezone=self._config.timezone,
        )
        self._settings.subscribe(self._quiet.settings_changed)

        self._cleanup_timer: TimerHandle | None = None
        log.info(
            "Notification engine initialised",
            extra={"online": self._monitor.online, "supported": sink.supported},
        )

    @classmethod
    def from_settings(
        cls,
        config: RelaynoteSettings,
        sink: NotificationSink,
        scheduler: Scheduler,
        connectivity: ConnectivitySource | None = None,
        renderer: BatchRenderer | None = None,
    ) -> NotificationEngine:
        """Build an engine from a loaded configuration tree."""
        from relaynote.storage import build_store  # noqa: PLC0415

        return cls(
            sink,
            build_store(config.storage),
            scheduler,
            connectivity,
            config.engine,
            HookRegistry(config.hooks),
            renderer,
            defaults=NotificationSettings.from_dict(config.defaults),
            settings_key=config.storage.settings_key,
            analytics_key=config.storage.analytics_key,
        )

    # -- inspection --------------------------------------------------------

    @property
    def settings(self) -> NotificationSettings:
        return self._settings.settings

    @property
    def hooks(self) -> HookRegistry:
        return self._hooks

    @property
    def online(self) -> bool:
        return self._monitor.online

    @property
    def offline_queue_size(self) -> int:
        return len(self._queue)

    @property
    def deferred_count(self) -> int:
        """Notifications held until quiet hours end."""
        return len(self._quiet)

    def pending_batches(self) -> list[str]:
        return self._batching.pending_keys()

    def retry_attempts(self, notification_id: str) -> int:
        return self._retry.attempts(notification_id)

    def failed_entries(self) -> list[FailedEntry]:
        return self._retry.failed_entries()

    def get_analytics(self) -> dict[str, int]:
        return self._analytics.snapshot()

    def reset_analytics(self) -> None:
        self._analytics.reset()

    def export_metrics(self) -> str:
        return self._analytics.export()

    # -- settings ----------------------------------------------------------

    def update_setting(self, key: str, value: Any) -> NotificationSettings:  # noqa: ANN401
        """Change one user setting (write-through)."""
        return self._settings.update(key, value)

    def set_priority(
        self,
        notification_type: NotificationType | str,
        priority: Priority | int | str,
    ) -> NotificationSettings:
        return self._settings.set_priority(notification_type, priority)

    # -- show --------------------------------------------------------------

    def show(
        self,
        title: str,
        message: str,
        *,
        type: NotificationType | str = NotificationType.SYSTEM_UPDATE,  # noqa: A002
        priority: Priority | int | str | None = None,
        data: dict[str, Any] | None = None,
        actions: Iterable[NotificationAction | dict] = (),
        icon: str | None = None,
        badge: str | None = None,
        persistent: bool = False,
        silent: bool = False,
        tag: str | None = None,
        renotify: bool = False,
        require_interaction: bool = False,
        url: str | None = None,
        sound: str | None = None,
        vibrate: Iterable[int] | None = None,
    ) -> ShowResult:
        """Request a notification.  Never raises."""
        if self._destroyed:
            return ShowResult(success=False, error="Notification engine has been destroyed")
        if not self._sink.supported:
            return ShowResult(success=False, error=UNSUPPORTED)
        try:
            self._ensure_cleanup()
            if not self._settings.settings.desktop_enabled:
                return ShowResult(success=False, reason=DESKTOP_DISABLED)
            notification = self.build(
                title,
                message,
                type=type,
                priority=priority,
                data=data,
                actions=actions,
                icon=icon,
                badge=badge,
                persistent=persistent,
                silent=silent,
                tag=tag,
                renotify=renotify,
                require_interaction=require_interaction,
                url=url,
                sound=sound,
                vibrate=vibrate,
            )
            return self._dispatch(notification)
        except Exception as exc:
            log.exception("Error showing notification '%s'", title)
            self._count_failure()
            return ShowResult(success=False, error=str(exc) or exc.__class__.__name__)

    def build(
        self,
        title: str,
        message: str,
        *,
        type: NotificationType | str = NotificationType.SYSTEM_UPDATE,  # noqa: A002
        priority: Priority | int | str | None = None,
        data: dict[str, Any] | None = None,
        actions: Iterable[NotificationAction | dict] = (),
        icon: str | None = None,
        badge: str | None = None,
        persistent: bool = False,
        silent: bool = False,
        tag: str | None = None,
        renotify: bool = False,
        require_interaction: bool = False,
        url: str | None = None,
        sound: str | None = None,
        vibrate: Iterable[int] | None = None,
    ) -> Notification:
        """Create a :class:`Notification` with all defaults resolved.

        Priority comes from the argument, then the user's per-type
        override, then the type's registry default.  CRITICAL always
        requires interaction; everything is silent while sound is
        disabled.
        """
        if not title:
            msg = "Notification title is required"
            raise ValueError(msg)
        settings = self._settings.settings
        notification_type = NotificationType(type)
        if priority is not None:
            resolved = Priority.coerce(priority)
        else:
            resolved = settings.priority_for(notification_type) or default_priority(
                notification_type
            )

        payload = dict(data or {})
        if url is not None:
            payload["url"] = url

        now = self._scheduler.now()
        return Notification(
            id=generate_id(int(now.timestamp() * 1000)),
            title=title,
            message=message,
            type=notification_type,
            priority=resolved,
            data=payload,
            actions=tuple(NotificationAction.coerce(a) for a in actions),
            icon=icon or default_icon(notification_type),
            badge=badge or DEFAULT_BADGE,
            timestamp=now.isoformat(),
            persistent=persistent,
            silent=silent or not settings.sound_enabled,
            tag=tag or notification_type.value,
            renotify=renotify,
            require_interaction=require_interaction or resolved is Priority.CRITICAL,
            sound=sound or resolved.sound,
            vibrate=tuple(vibrate) if vibrate else resolved.vibration,
        )

    def _dispatch(self, notification: Notification, *, check_quiet: bool = True) -> ShowResult:
        if check_quiet and self._quiet.should_defer(notification):
            self._quiet.defer(notification)
            return ShowResult(
                success=True, queued=True, reason=QUIET_HOURS, notification_id=notification.id
            )
        if not self._monitor.online:
            self._queue.push(notification, reason=OFFLINE)
            return ShowResult(
                success=True, queued=True, reason=OFFLINE, notification_id=notification.id
            )
        if self._batching.should_batch(notification):
            return self._batching.add(notification)
        return self.show_immediate(notification)

    def _release_deferred(self, notification: Notification) -> None:
        self._dispatch(notification, check_quiet=False)

    def show_immediate(self, notification: Notification) -> ShowResult:
        """Attempt display now, bypassing quiet hours and batching."""
        try:
            self._ensure_cleanup()
            return self._delivery.show_immediate(notification)
        except Exception as exc:
            log.exception(
                "Unexpected error delivering notification",
                extra={"notification_id": notification.id},
            )
            self._count_failure()
            return ShowResult(
                success=False,
                error=str(exc) or type(exc).__name__,
                notification_id=notification.id,
            )

    def _count_failure(self) -> None:
        try:
            self._analytics.increment("failed")
        except Exception:
            log.exception("Could not record failure in analytics")

    # -- permission --------------------------------------------------------

    def request_permission(
        self,
        consent: Callable[[], bool] | None = None,
        on_denied: Callable[[], None] | None = None,
    ) -> bool:
        """Ask the host for notification permission.

        Parameters
        ----------
        consent:
            Optional pre-prompt; returning ``False`` aborts without
            asking the platform.
        on_denied:
            Called when the platform denies permission.

        Raises
        ------
        PlatformUnsupportedError
            If the host has no notification surface.

        """
        if not self._sink.supported:
            raise PlatformUnsupportedError
        if self._sink.permission() == PermissionState.GRANTED:
            return True

        try:
            if consent is not None and not consent():
                log.info("Permission request declined at the consent step")
                return False
            state = self._sink.request_permission()
        except Exception:
            log.exception("Error requesting notification permission")
            return False

        if state == PermissionState.GRANTED:
            log.info("Notification permission granted")
            self.show_immediate(
                self.build(
                    WELCOME_TITLE,
                    WELCOME_MESSAGE,
                    type=NotificationType.SYSTEM_SUCCESS,
                    priority=Priority.LOW,
                )
            )
            if self._monitor.online:
                self._drain_offline_queue()
            return True

        log.warning("Notification permission %s", state.value)
        if on_denied is not None:
            try:
                on_denied()
            except Exception:
                log.exception("Permission-denied callback raised")
        return False

    # -- connectivity ------------------------------------------------------

    def _on_connection_change(self, online: bool) -> None:
        self._emit("connection.change", {"online": online, "queued": len(self._queue)})
        if online:
            self._show_connection_notice(online=True)
            self._drain_offline_queue()
        else:
            self._show_connection_notice(online=False)

    def _show_connection_notice(self, *, online: bool) -> None:
        notice = self.build(
            CONNECTION_RESTORED_TITLE if online else CONNECTION_LOST_TITLE,
            CONNECTION_RESTORED_MESSAGE if online else CONNECTION_LOST_MESSAGE,
            type=NotificationType.CONNECTION_STATUS,
            priority=Priority.LOW,
            silent=not online,
        )
        try:
            self._delivery.show_best_effort(notice)
        except Exception:
            log.exception("Could not show connection notice")

    def _drain_offline_queue(self) -> int:
        pending = self._queue.drain()
        if pending:
            log.info("Processing %d offline notification(s)", len(pending))
        for notification in pending:
            self.show_immediate(notification)
        return len(pending)

    # -- events ------------------------------------------------------------

    def handle_action(self, action: str, data: dict[str, Any] | None = None) -> None:
        """Relay an action reported outside a handle (e.g. a background worker)."""
        self._emit("notification.action", {"action": action, "data": dict(data or {})})

    def _emit(self, event: str, context: dict[str, Any]) -> None:
        try:
            self._hooks.dispatch(event, context)
        except Exception:
            log.exception("Error dispatching hook event '%s'", event)

    def _on_failed(self, entry: FailedEntry) -> None:
        self._emit(
            "notification.failed",
            {
                "notification": entry.notification.to_dict(),
                "error": entry.error,
                "attempts": entry.notification.attempts,
            },
        )

    # -- housekeeping ------------------------------------------------------

    def cleanup(self) -> tuple[int, int]:
        """Prune retry records and failed entries past their maximum age."""
        removed = self._retry.cleanup(self._scheduler.now(), self._config.max_entry_age_ms)
        if any(removed):
            log.info(
                "Cleanup removed %d retry record(s) and %d failed entry(ies)",
                *removed,
            )
        return removed

    def _ensure_cleanup(self) -> None:
        """Arm the periodic cleanup on first use.

        Deferred out of the constructor so an engine can be built before
        its event loop is running.
        """
        if self._cleanup_timer is None and not self._destroyed:
            self._schedule_cleanup()

    def _schedule_cleanup(self) -> None:
        self._cleanup_timer = self._scheduler.after(
            self._config.cleanup_interval_ms, self._run_cleanup
        )

    def _run_cleanup(self) -> None:
        self._cleanup_timer = None
        if self._destroyed:
            return
        try:
            self.cleanup()
        except Exception:
            log.exception("Periodic cleanup failed")
        self._schedule_cleanup()

    def destroy(self, *, flush: bool = False) -> None:
        """Cancel every timer and empty every queue.

        With *flush*, pending batches are delivered first.
        """
        if self._destroyed:
            return
        if flush:
            self._batching.flush_all()
        self._destroyed = True
        if self._cleanup_timer is not None:
            self._cleanup_timer.cancel()
            self._cleanup_timer = None
        self._batching.cancel_all()
        self._quiet.cancel()
        self._retry.cancel_all()
        self._queue.clear()
        self._monitor.stop()
        if self._owns_hooks:
            self._hooks.shutdown()
        log.info("Notification engine destroyed")
