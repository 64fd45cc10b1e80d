"""Sink that writes notifications to the ``relaynote.sink`` logger.

Useful on headless hosts and for the ``relaynote demo`` command.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from relaynote.platform.base import NotificationHandle, NotificationSink

if TYPE_CHECKING:
    from relaynote.platform.base import DisplayOptions

log = logging.getLogger("relaynote.sink")


class LoggingSink(NotificationSink):
    def display(self, title: str, options: DisplayOptions) -> NotificationHandle:
        log.info(
            "NOTIFY %s: %s",
            title,
            options.body,
            extra={
                "tag": options.tag,
                "silent": options.silent,
                "require_interaction": options.require_interaction,
                "url": options.data.get("url"),
                "actions": [a.get("action") for a in options.actions],
            },
        )
        return NotificationHandle()

    def play_sound(self, src: str, volume: float) -> None:
        log.debug("Sound %s at volume %.1f", src, volume)

    def navigate(self, url: str) -> None:
        log.info("Navigate to %s", url)
