"""Settings store: user toggles persisted as one JSON blob.

Loaded once at construction and re-persisted on every mutation
(write-through).  The blob shape is validated with ``jsonschema``;
a corrupt or invalid blob is logged and replaced by the defaults
instead of failing startup.

Key forms accepted by :meth:`SettingsStore.update`::

    store.update("soundEnabled", False)
    store.update("sound_enabled", False)
    store.update("quietHours.start", "23:00")
    store.update("quiet_hours.enabled", True)
    store.update("priority.task_assigned", "high")
"""

from __future__ import annotations

import copy
import json
import logging
import re
from typing import TYPE_CHECKING, Any

from jsonschema import Draft202012Validator

from relaynote.core.types import NotificationType, Priority
from relaynote.models.settings import NotificationSettings

if TYPE_CHECKING:
    from collections.abc import Callable

    from relaynote.storage.base import KeyValueStore

log = logging.getLogger(__name__)

_HHMM = "^([01][0-9]|2[0-3]):[0-5][0-9]$"

SETTINGS_BLOB_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "soundEnabled": {"type": "boolean"},
        "vibrationEnabled": {"type": "boolean"},
        "desktopEnabled": {"type": "boolean"},
        "batchingEnabled": {"type": "boolean"},
        "quietHours": {
            "type": "object",
            "properties": {
                "enabled": {"type": "boolean"},
                "start": {"type": "string", "pattern": _HHMM},
                "end": {"type": "string", "pattern": _HHMM},
            },
        },
        "priority": {
            "type": "object",
            "propertyNames": {"enum": [t.value for t in NotificationType]},
            "additionalProperties": {"enum": [p.level for p in Priority]},
        },
    },
}

_validator = Draft202012Validator(SETTINGS_BLOB_SCHEMA)

_SNAKE_RE = re.compile(r"_([a-z])")


def _camel(name: str) -> str:
    return _SNAKE_RE.sub(lambda m: m.group(1).upper(), name)


def _schema_errors(blob: dict) -> list[str]:
    return [
        f"{'.'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}"
        for err in sorted(_validator.iter_errors(blob), key=lambda e: list(e.absolute_path))
    ]


class SettingsStore:
    """Owns the current :class:`NotificationSettings`.

    Parameters
    ----------
    store:
        Key-value backend holding the serialized blob.
    key:
        Storage key of the blob.
    defaults:
        Settings used when nothing (or nothing valid) is stored; a
        stored blob is merged over them.

    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = "notification_settings",
        defaults: NotificationSettings | None = None,
    ) -> None:
        self._store = store
        self._key = key
        self._defaults = defaults or NotificationSettings()
        self._listeners: list[Callable[[NotificationSettings], None]] = []
        self._settings = self._load()

    @property
    def settings(self) -> NotificationSettings:
        return self._settings

    # -- persistence -------------------------------------------------------

    def _load(self) -> NotificationSettings:
        raw = self._store.get(self._key)
        if raw is None:
            return self._defaults.copy()
        try:
            blob = json.loads(raw)
        except json.JSONDecodeError as exc:
            log.warning("Stored settings under '%s' are not valid JSON: %s", self._key, exc)
            return self._defaults.copy()
        if not isinstance(blob, dict):
            log.warning("Stored settings under '%s' are not an object, using defaults", self._key)
            return self._defaults.copy()
        errors = _schema_errors(blob)
        if errors:
            log.warning(
                "Stored settings under '%s' failed validation, using defaults: %s",
                self._key,
                "; ".join(errors),
            )
            return self._defaults.copy()
        return NotificationSettings.from_dict(blob, base=self._defaults)

    def save(self) -> None:
        self._store.set(self._key, json.dumps(self._settings.to_dict(), sort_keys=True))

    def reload(self) -> NotificationSettings:
        """Re-read the stored blob, replacing the in-memory settings."""
        self._settings = self._load()
        self._notify()
        return self._settings

    # -- mutation ----------------------------------------------------------

    def update(self, key: str, value: Any) -> NotificationSettings:  # noqa: ANN401
        """Set one setting and persist.

        Raises :class:`ValueError` if the resulting settings would not
        pass validation; the current settings are left untouched.
        """
        parts = [p for p in key.split(".") if p]
        if not parts:
            msg = "Setting key must not be empty"
            raise ValueError(msg)
        parts[0] = _camel(parts[0])
        if parts[0] == "quietHours" and len(parts) > 1:
            parts[1:] = [_camel(p) for p in parts[1:]]
        if isinstance(value, Priority):
            value = value.level

        blob = copy.deepcopy(self._settings.to_dict())
        target = blob
        for part in parts[:-1]:
            node = target.get(part)
            if not isinstance(node, dict):
                node = {}
                target[part] = node
            target = node
        target[parts[-1]] = value

        errors = _schema_errors(blob)
        if errors:
            msg = f"Invalid value for setting '{key}': {'; '.join(errors)}"
            raise ValueError(msg)

        self._settings = NotificationSettings.from_dict(blob)
        self.save()
        log.debug("Setting %s updated", key, extra={"setting": key})
        self._notify()
        return self._settings

    def set_priority(
        self,
        notification_type: NotificationType | str,
        priority: Priority | int | str,
    ) -> NotificationSettings:
        """Override the default priority of *notification_type*."""
        notification_type = NotificationType(notification_type)
        return self.update(f"priority.{notification_type.value}", Priority.coerce(priority))

    def replace(self, settings: NotificationSettings) -> None:
        """Swap in a whole settings object and persist."""
        errors = _schema_errors(settings.to_dict())
        if errors:
            msg = f"Invalid settings: {'; '.join(errors)}"
            raise ValueError(msg)
        self._settings = settings.copy()
        self.save()
        self._notify()

    # -- listeners ---------------------------------------------------------

    def subscribe(self, listener: Callable[[NotificationSettings], None]) -> None:
        """Call *listener* with the new settings after every change."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._settings)
            except Exception:
                log.exception("Settings listener %r raised", listener)
