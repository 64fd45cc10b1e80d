"""Scripted delivery scenario against the logging sink.

Shows a burst of task assignments (collapsed into one batch), an
urgent deadline (delivered straight away), then a brief offline spell
whose notification is delivered on reconnect.
"""

from __future__ import annotations

import asyncio
import json
import logging

log = logging.getLogger(__name__)


def run_demo(config, args) -> None:
    """Run the demo scenario on a fresh event loop."""
    engine_settings = config.settings.engine
    wait = args.wait
    if wait is None:
        wait = engine_settings.batch_delay_ms / 1000 + 1
    analytics = asyncio.run(_scenario(config.settings, wait))
    print(json.dumps(analytics, indent=2))  # noqa: T201


async def _scenario(settings, wait: float) -> dict[str, int]:
    from relaynote.core.scheduler import AsyncioScheduler
    from relaynote.notifications import BatchRenderer
    from relaynote.platform import LoggingSink, ManualConnectivity
    from relaynote.services import NotificationEngine
    from relaynote.services.builders import (
        show_deadline_approaching,
        show_task_assigned,
    )

    connectivity = ManualConnectivity(online=True)
    engine = NotificationEngine.from_settings(
        settings,
        LoggingSink(),
        AsyncioScheduler(),
        connectivity,
        BatchRenderer(settings.engine.templates_path),
    )
    try:
        for idx, task in enumerate(("Write report", "Review PR", "Plan sprint"), start=1):
            result = show_task_assigned(engine, task=task, assigned_by="Alice", task_id=str(idx))
            log.info("show(%s) -> %s", task, result.to_dict())

        result = show_deadline_approaching(
            engine, task="Quarterly filing", hours_remaining=0.5, task_id="99"
        )
        log.info("deadline -> %s", result.to_dict())

        connectivity.set_online(False)
        result = engine.show("Build finished", "Nightly build passed", type="system_success")
        log.info("offline show -> %s", result.to_dict())
        connectivity.set_online(True)

        await asyncio.sleep(wait)
        return engine.get_analytics()
    finally:
        engine.destroy(flush=True)
