"""User settings subcommands."""

from __future__ import annotations

import json
import logging
import sys

import yaml

log = logging.getLogger(__name__)


def run_settings(config, args) -> None:
    """Handle settings subcommands."""
    if args.settings_command == "show":
        _settings_show(config)
    elif args.settings_command == "set":
        _settings_set(config, args.key, args.value)
    else:
        sys.exit(1)


def _open_store(config):
    from relaynote.models.settings import NotificationSettings
    from relaynote.services.settings_store import SettingsStore
    from relaynote.storage import build_store

    storage = config.settings.storage
    if storage.backend == "memory":
        log.warning("storage.backend is 'memory'; changes will not persist")
    return SettingsStore(
        build_store(storage),
        storage.settings_key,
        NotificationSettings.from_dict(config.settings.defaults),
    )


def _settings_show(config) -> None:
    """Print the effective user settings as JSON."""
    store = _open_store(config)
    print(json.dumps(store.settings.to_dict(), indent=2, sort_keys=True))  # noqa: T201


def parse_value(raw: str):
    """Parse a command-line value as a YAML scalar (``true``, ``5``, ``high``).

    Clock times such as ``22:30`` stay strings.
    """
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    if isinstance(value, (dict, list)) or value is None:
        return raw
    if isinstance(value, int) and not isinstance(value, bool) and ":" in raw:
        return raw
    return value


def _settings_set(config, key: str, raw: str) -> None:
    """Update one setting and print the result."""
    store = _open_store(config)
    store.update(key, parse_value(raw))
    log.info("Setting %s updated", key)
    print(json.dumps(store.settings.to_dict(), indent=2, sort_keys=True))  # noqa: T201
