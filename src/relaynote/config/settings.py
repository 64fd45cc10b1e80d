"""Typed, frozen dataclasses for every configuration section.

This module is the **single source of truth** for default values.
JSON Schema defaults exist only for documentation; these builders
are what the application actually reads.

Access pattern::

    from relaynote.config import get_config

    engine = get_config().settings.engine
    print(engine.max_retries, engine.batch_delay_ms)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from relaynote.core.types import NotificationType

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineSettings:
    """Delivery engine tuning (retries, batching windows, cleanup)."""

    max_retries: int
    retry_base_delay_ms: int
    batch_delay_ms: int
    fast_batch_delay_ms: int
    fast_batch_types: frozenset[NotificationType]
    cleanup_interval_ms: int
    max_entry_age_ms: int
    max_actions: int
    timezone: str | None
    templates_path: str | None


def _build_engine(data: dict | None) -> EngineSettings:
    d = data or {}
    return EngineSettings(
        max_retries=d.get("max_retries", 3),
        retry_base_delay_ms=d.get("retry_base_delay_ms", 1000),
        batch_delay_ms=d.get("batch_delay_ms", 5000),
        fast_batch_delay_ms=d.get("fast_batch_delay_ms", 2000),
        fast_batch_types=frozenset(
            NotificationType(t) for t in d.get("fast_batch_types", [])
        ),
        cleanup_interval_ms=d.get("cleanup_interval_ms", 5 * 60 * 1000),
        max_entry_age_ms=d.get("max_entry_age_ms", 24 * 60 * 60 * 1000),
        max_actions=d.get("max_actions", 2),
        timezone=d.get("timezone"),
        templates_path=d.get("templates_path"),
    )


def default_engine_settings() -> EngineSettings:
    """Engine settings with every default applied (no config file)."""
    return _build_engine(None)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StorageSettings:
    """Where the settings and analytics blobs are persisted."""

    backend: str
    path: str | None
    settings_key: str
    analytics_key: str


def _build_storage(data: dict | None) -> StorageSettings:
    d = data or {}
    return StorageSettings(
        backend=d.get("backend", "memory"),
        path=d.get("path"),
        settings_key=d.get("settings_key", "notification_settings"),
        analytics_key=d.get("analytics_key", "notification_analytics"),
    )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingSettings:
    """Application logging configuration (level, format)."""

    level: str
    format: str


def _build_logging(data: dict | None) -> LoggingSettings:
    d = data or {}
    return LoggingSettings(
        level=d.get("level", "INFO"),
        format=d.get("format", "text"),
    )


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HookEntrySettings:
    """Single registered hook entry with events and config."""

    class_path: str
    enabled: bool
    events: tuple[str, ...]
    config: dict[str, Any]


@dataclass(frozen=True)
class HookSettings:
    """Outbound event hooks (registry and slow-hook warning threshold)."""

    warn_after_ms: int
    registered: tuple[HookEntrySettings, ...]


def _build_hooks(data: dict | None) -> HookSettings:
    from relaynote.hooks.events import KNOWN_EVENTS  # noqa: PLC0415

    d = data or {}
    registered = []
    for idx, entry in enumerate(d.get("registered", [])):
        events = tuple(entry.get("events", []))
        for evt in events:
            if evt not in KNOWN_EVENTS:
                msg = (
                    f"hooks.registered[{idx}].events: unknown event "
                    f"'{evt}'. Known events: {sorted(KNOWN_EVENTS)}"
                )
                raise ValueError(msg)
        registered.append(
            HookEntrySettings(
                class_path=entry["class"],
                enabled=entry.get("enabled", True),
                events=events,
                config=entry.get("config", {}),
            )
        )
    return HookSettings(
        warn_after_ms=d.get("warn_after_ms", 100),
        registered=tuple(registered),
    )


# ---------------------------------------------------------------------------
# Root settings aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RelaynoteSettings:
    engine: EngineSettings
    storage: StorageSettings
    logging: LoggingSettings
    hooks: HookSettings
    defaults: dict[str, Any]


def build_settings(data: dict) -> RelaynoteSettings:
    """Build the full typed settings tree from raw config data.

    ``defaults`` is kept as the raw persisted-settings shape; it seeds
    :class:`~relaynote.models.settings.NotificationSettings` before the
    stored blob is merged over it.
    """
    return RelaynoteSettings(
        engine=_build_engine(data.get("engine")),
        storage=_build_storage(data.get("storage")),
        logging=_build_logging(data.get("logging")),
        hooks=_build_hooks(data.get("hooks")),
        defaults=dict(data.get("defaults") or {}),
    )
