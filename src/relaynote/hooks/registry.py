"""Hook registry: loads, manages, and dispatches outbound events.

Loads :class:`Hook` subclasses from configuration at startup, accepts
programmatic listeners via :meth:`HookRegistry.register`, and provides
the central :meth:`dispatch` method used by the engine.

Dispatch runs synchronously on the caller's event loop; the engine is
single-threaded and hooks are expected to be quick.

- Context isolation via ``copy.deepcopy`` + shallow copy per hook
  (shallow only when the payload cannot be deep-copied)
- Structured logging with hook_name, event, duration_ms
- Dispatch/error counters
- Shutdown guard (dispatch after :meth:`shutdown` is a no-op)
- Fail-loud hook loading (broken hook → engine refuses to start)
- class_path regex validation before ``importlib``
- ``validate_config()`` called before instantiation

Usage::

    from relaynote.hooks.registry import HookRegistry

    registry = HookRegistry(settings.hooks)
    registry.dispatch("notification.clicked", {"notification": {...}})
"""

from __future__ import annotations

import copy
import importlib
import logging
import re
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from relaynote.hooks.base import Hook
from relaynote.hooks.events import EVENT_METHOD_MAP, KNOWN_EVENTS

if TYPE_CHECKING:
    from collections.abc import Iterable

    from relaynote.config.settings import HookEntrySettings, HookSettings

log = logging.getLogger(__name__)

_CLASS_PATH_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)+$")


@dataclass
class _LoadedHook:
    """Internal wrapper for a loaded hook instance."""

    instance: Hook
    name: str
    subscribed_events: frozenset = field(default_factory=frozenset)


def _subscriptions(name: str, events: Iterable[str] | None) -> frozenset[str]:
    if not events:
        return KNOWN_EVENTS
    unknown = frozenset(events) - KNOWN_EVENTS
    if unknown:
        msg = (
            f"Hook '{name}' subscribes to unknown events: "
            f"{sorted(unknown)}. Known events: {sorted(KNOWN_EVENTS)}"
        )
        raise ValueError(msg)
    return frozenset(events)


class HookRegistry:
    """Registry of loaded hooks with synchronous, isolated dispatch.

    Parameters
    ----------
    settings:
        The ``hooks`` section from :class:`RelaynoteSettings`.  ``None``
        starts an empty registry for programmatic use.

    """

    def __init__(self, settings: HookSettings | None = None) -> None:
        self._settings = settings
        self._warn_after_ms = settings.warn_after_ms if settings is not None else 100
        self._hooks: list[_LoadedHook] = []
        self._shutdown = False
        self._dispatch_count: int = 0
        self._error_count: int = 0
        self._load()

    # -- metrics properties ------------------------------------------------

    @property
    def dispatch_count(self) -> int:
        """Total number of hook invocations completed (success + error)."""
        return self._dispatch_count

    @property
    def error_count(self) -> int:
        """Total number of hook invocations that raised."""
        return self._error_count

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def __len__(self) -> int:
        return len(self._hooks)

    # -- loading -----------------------------------------------------------

    def _load(self) -> None:
        """Load all enabled hooks from configuration.

        Raises on any failure; the engine must not start with broken
        hooks.
        """
        if self._settings is None:
            return
        for entry in self._settings.registered:
            if not entry.enabled:
                log.debug("Hook '%s' is disabled, skipping", entry.class_path)
                continue
            try:
                self._load_hook(entry)
            except Exception:
                log.critical(
                    "Failed to load hook '%s', refusing to start",
                    entry.class_path,
                    exc_info=True,
                )
                raise

        if self._hooks:
            log.info("Loaded %d hook(s)", len(self._hooks))

    def _load_hook(self, entry: HookEntrySettings) -> None:
        """Import, validate, and instantiate a single hook."""
        if not _CLASS_PATH_RE.match(entry.class_path):
            msg = (
                f"Invalid hook class path '{entry.class_path}': must match "
                "'package.module.ClassName' (only alphanumerics and underscores)"
            )
            raise ValueError(msg)

        module_path, _, cls_name = entry.class_path.rpartition(".")
        module = importlib.import_module(module_path)
        cls = getattr(module, cls_name)

        if not (isinstance(cls, type) and issubclass(cls, Hook)):
            msg = f"Hook '{entry.class_path}' must be a subclass of relaynote.hooks.Hook"
            raise TypeError(msg)

        cls.validate_config(entry.config)
        instance = cls(config=entry.config)
        subscribed = _subscriptions(entry.class_path, entry.events)

        self._hooks.append(
            _LoadedHook(instance=instance, name=entry.class_path, subscribed_events=subscribed),
        )
        log.info(
            "Loaded hook: %s (events=%s)",
            entry.class_path,
            "all" if subscribed == KNOWN_EVENTS else sorted(subscribed),
        )

    def register(self, hook: Hook, events: Iterable[str] | None = None) -> None:
        """Add an already-instantiated hook.

        *events* restricts the subscription; the default is every
        known event.
        """
        if not isinstance(hook, Hook):
            msg = f"{hook!r} is not a relaynote.hooks.Hook"
            raise TypeError(msg)
        name = f"{type(hook).__module__}.{type(hook).__qualname__}"
        self._hooks.append(
            _LoadedHook(instance=hook, name=name, subscribed_events=_subscriptions(name, events)),
        )
        log.debug("Registered hook: %s", name)

    # -- dispatch ----------------------------------------------------------

    def dispatch(self, event: str, context: dict) -> None:
        """Dispatch an event to all subscribed hooks.

        Failures are logged and counted but never propagated.

        Parameters
        ----------
        event:
            The event name (e.g. ``"notification.clicked"``).
        context:
            Event-specific context dictionary.  Deep-copied once
            (shallow-copied if that fails); each hook receives its
            own shallow copy.

        """
        method_name = EVENT_METHOD_MAP.get(event)
        if method_name is None:
            msg = f"Unknown hook event '{event}'. Known events: {sorted(KNOWN_EVENTS)}"
            raise ValueError(msg)

        if self._shutdown or not self._hooks:
            return

        try:
            base_context = copy.deepcopy(context)
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "Context for event '%s' could not be deep-copied (%s); "
                "hooks receive a shallow copy",
                event,
                exc,
                extra={"event": event},
            )
            base_context = dict(context)

        for loaded in list(self._hooks):
            if event not in loaded.subscribed_events:
                continue
            self._execute_hook(loaded, method_name, base_context.copy(), event)

    def _execute_hook(
        self,
        loaded: _LoadedHook,
        method_name: str,
        context: dict,
        event: str,
    ) -> None:
        start = time.monotonic()
        error: Exception | None = None
        try:
            getattr(loaded.instance, method_name)(context)
        except Exception as exc:  # noqa: BLE001
            error = exc
        elapsed_ms = round((time.monotonic() - start) * 1000, 2)

        self._dispatch_count += 1
        extra = {
            "hook_name": loaded.name,
            "event": event,
            "outcome": "error" if error else "success",
            "duration_ms": elapsed_ms,
        }

        if error is not None:
            self._error_count += 1
            log.error(
                "Hook '%s' raised an exception for event '%s' (%.1fms): %s",
                loaded.name,
                event,
                elapsed_ms,
                error,
                extra=extra,
            )
        elif elapsed_ms > self._warn_after_ms:
            log.warning(
                "Hook '%s' was slow handling '%s' (%.1fms > %dms)",
                loaded.name,
                event,
                elapsed_ms,
                self._warn_after_ms,
                extra=extra,
            )
        else:
            log.debug(
                "Hook '%s' completed event '%s' in %.1fms",
                loaded.name,
                event,
                elapsed_ms,
                extra=extra,
            )

    # -- lifecycle ---------------------------------------------------------

    def shutdown(self) -> None:
        """Stop dispatching.  Safe to call multiple times."""
        if self._shutdown:
            return
        self._shutdown = True
        log.info(
            "Hook registry shut down (dispatched=%d, errors=%d)",
            self._dispatch_count,
            self._error_count,
        )
