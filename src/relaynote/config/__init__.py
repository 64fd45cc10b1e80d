"""Configuration subsystem for relaynote.

Public API::

    from relaynote.config import get_config, RelaynoteConfig

    # At startup (CLI or host application):
    RelaynoteConfig(config_file="config.yaml")

    # Everywhere else:
    cfg = get_config()
    delay = cfg.settings.engine.batch_delay_ms   # typed access
"""

from relaynote.config.relaynote_config import (
    ConfigValidationError,
    RelaynoteConfig,
    get_config,
)
from relaynote.config.settings import (
    EngineSettings,
    HookEntrySettings,
    HookSettings,
    LoggingSettings,
    RelaynoteSettings,
    StorageSettings,
    build_settings,
    default_engine_settings,
)

__all__ = [
    "ConfigValidationError",
    "EngineSettings",
    "HookEntrySettings",
    "HookSettings",
    "LoggingSettings",
    "RelaynoteConfig",
    "RelaynoteSettings",
    "StorageSettings",
    "build_settings",
    "default_engine_settings",
    "get_config",
]
