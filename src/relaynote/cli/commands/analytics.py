"""Delivery analytics subcommands."""

from __future__ import annotations

import json
import logging
import sys

log = logging.getLogger(__name__)


def run_analytics(config, args) -> None:
    """Handle analytics subcommands."""
    recorder = _open_recorder(config)
    if args.analytics_command == "show":
        print(json.dumps(recorder.snapshot(), indent=2))  # noqa: T201
    elif args.analytics_command == "reset":
        recorder.reset()
        print("analytics reset")  # noqa: T201
    elif args.analytics_command == "export":
        sys.stdout.write(recorder.export())
    else:
        sys.exit(1)


def _open_recorder(config):
    from relaynote.services.analytics import AnalyticsRecorder
    from relaynote.storage import build_store

    storage = config.settings.storage
    return AnalyticsRecorder(build_store(storage), storage.analytics_key)
