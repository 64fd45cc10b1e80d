"""relaynote configuration loader built on ConfigKit.

Lifecycle::

    # 1. CLI (or the host application) creates the singleton once
    RelaynoteConfig(config_file="/etc/relaynote/config.yaml")

    # 2. Any module retrieves it afterwards
    from relaynote.config import get_config
    cfg = get_config()
    cfg.settings.engine.max_retries  # typed access

    # 3. Extension / dynamic access
    cfg.get("engine.batch_delay_ms", default=5000)
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from configkit import ConfigKit, ConfigKitMeta

from relaynote.config.settings import RelaynoteSettings, build_settings

_SCHEMA_PATH = Path(__file__).parent / "schema.json"

_ENV_RE = re.compile(
    r"^\$\{([^}:]+?)(?::-(.*))?\}$",
    re.DOTALL,
)

_CLASS_PATH_RE = re.compile(
    r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)+$",
)

_HHMM_RE = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Module-level singleton reference
# ---------------------------------------------------------------------------
_instance: RelaynoteConfig | None = None


def get_config() -> RelaynoteConfig:
    """Return the initialised configuration singleton.

    Raises :class:`RuntimeError` if :class:`RelaynoteConfig` has not been
    created yet.
    """
    if _instance is None:
        msg = (
            "Configuration not initialised. "
            "RelaynoteConfig must be created with config_file= before calling get_config()."
        )
        raise RuntimeError(msg)
    return _instance


# ---------------------------------------------------------------------------
# Validation error collector
# ---------------------------------------------------------------------------


class ConfigValidationError(Exception):
    """Raised when cross-field validation finds one or more problems."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        body = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"Configuration validation failed:\n{body}")


# ---------------------------------------------------------------------------
# Environment variable resolution
# ---------------------------------------------------------------------------


def _resolve_value(value: str, path: str) -> str:
    """Replace ``${VAR}`` or ``${VAR:-default}`` with env var value."""
    match = _ENV_RE.match(value)
    if match is None:
        return value
    var_name = match.group(1)
    fallback = match.group(2)
    resolved = os.environ.get(var_name)
    if resolved is not None:
        return resolved
    if fallback is not None:
        return fallback
    raise ConfigValidationError(
        [
            f"Environment variable '${{{var_name}}}' referenced "
            f"at '{path}' is not set and has no default",
        ],
    )


def _resolve_env_vars(
    data: Any,  # noqa: ANN401
    path: str = "",
) -> None:
    """Walk *data* in-place and resolve ``${VAR}``/``${VAR:-default}`` strings."""
    if isinstance(data, dict):
        for key in data:
            child_path = f"{path}.{key}" if path else key
            if isinstance(data[key], str):
                data[key] = _resolve_value(data[key], child_path)
            elif isinstance(data[key], (dict, list)):
                _resolve_env_vars(data[key], child_path)
    elif isinstance(data, list):
        for idx, item in enumerate(data):
            child_path = f"{path}[{idx}]"
            if isinstance(item, str):
                data[idx] = _resolve_value(item, child_path)
            elif isinstance(item, (dict, list)):
                _resolve_env_vars(item, child_path)


# ---------------------------------------------------------------------------
# Config class
# ---------------------------------------------------------------------------


class RelaynoteConfig(ConfigKit):
    """Central configuration for relaynote.

    Subclasses :class:`configkit.ConfigKit`.  The JSON schema is
    bundled at ``config/schema.json``; users supply only ``config_file``.

    After construction the typed settings tree is available at
    :pyattr:`settings` and the raw dict via :pyattr:`data` /
    :pymeth:`get`.
    """

    def __init__(
        self,
        *,
        config_file: str | Path,
        schema_file: str | Path | None = None,  # noqa: ARG002
    ) -> None:
        """Initialise the configuration singleton.

        Parameters
        ----------
        config_file:
            Path to the YAML/JSON configuration file.
        schema_file:
            Ignored.  Exists only to satisfy the
            :class:`ConfigKitMeta` singleton guard.

        """
        global _instance  # noqa: PLW0603

        super().__init__(
            config_file=config_file,
            schema_file=_SCHEMA_PATH,
        )

        self._settings: RelaynoteSettings = build_settings(self.data)
        _instance = self

    # -- lifecycle overrides ------------------------------------------------

    def _load(self) -> None:
        """Load config file then resolve ``${VAR}`` env-var references.

        Runs env-var resolution **before** schema validation so that
        substituted values (e.g. ``${LOG_LEVEL:-INFO}``) are checked
        against enum constraints in the schema.
        """
        super()._load()
        _resolve_env_vars(self._data)  # noqa: SLF001

    # -- typed access -------------------------------------------------------

    @property
    def settings(self) -> RelaynoteSettings:
        """Fully-typed, frozen settings tree."""
        return self._settings

    # -- cross-field validation ---------------------------------------------

    def additional_checks(self) -> None:
        """Semantic & cross-field validation.

        Called automatically by ConfigKit **after** schema validation
        passes.
        """
        errors: list[str] = []
        warnings: list[str] = []

        engine = self.data.get("engine") or {}
        storage = self.data.get("storage") or {}
        hooks = self.data.get("hooks") or {}
        defaults = self.data.get("defaults") or {}

        # -- engine --
        batch_delay = engine.get("batch_delay_ms", 5000)
        fast_delay = engine.get("fast_batch_delay_ms", 2000)
        if fast_delay > batch_delay:
            warnings.append(
                f"engine.fast_batch_delay_ms ({fast_delay}) is longer than "
                f"engine.batch_delay_ms ({batch_delay}); fast-tracked types "
                "will aggregate more slowly than the rest",
            )
        cleanup = engine.get("cleanup_interval_ms", 300000)
        max_age = engine.get("max_entry_age_ms", 86400000)
        if cleanup > max_age:
            warnings.append(
                f"engine.cleanup_interval_ms ({cleanup}) exceeds "
                f"engine.max_entry_age_ms ({max_age}); stale entries will "
                "outlive their maximum age",
            )
        tz_name = engine.get("timezone")
        if tz_name:
            try:
                ZoneInfo(tz_name)
            except (ZoneInfoNotFoundError, ValueError):
                errors.append(f"engine.timezone '{tz_name}' is not a known IANA zone")

        # -- storage --
        if storage.get("backend", "memory") == "file" and not storage.get("path"):
            errors.append("storage.path is required when storage.backend is 'file'")
        if storage.get("settings_key", "notification_settings") == storage.get(
            "analytics_key", "notification_analytics"
        ):
            errors.append("storage.settings_key and storage.analytics_key must differ")

        # -- hooks --
        for idx, entry in enumerate(hooks.get("registered", [])):
            class_path = entry.get("class", "")
            if class_path and not _CLASS_PATH_RE.match(class_path):
                errors.append(
                    f"hooks.registered[{idx}].class '{class_path}' is not a "
                    "valid fully qualified Python class path "
                    "(expected 'package.module.ClassName')",
                )

        # -- user defaults --
        quiet = defaults.get("quietHours") or {}
        if quiet.get("enabled") and quiet.get("start") == quiet.get("end"):
            warnings.append(
                "defaults.quietHours.start equals defaults.quietHours.end; "
                "the quiet window covers a single minute",
            )
        for key in ("start", "end"):
            value = quiet.get(key)
            if value is not None and not _HHMM_RE.match(value):
                errors.append(f"defaults.quietHours.{key} '{value}' is not HH:MM")

        for w in warnings:
            log.warning("Config warning: %s", w)

        if errors:
            raise ConfigValidationError(errors)

    # -- helpers ------------------------------------------------------------

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton -- testing only."""
        global _instance  # noqa: PLW0603
        _instance = None
        ConfigKitMeta.reset()

    def __repr__(self) -> str:
        source = self.data.get("_source", "?")
        return f"<RelaynoteConfig config_file={source}>"
