"""Host platform abstraction.

Public API::

    from relaynote.platform import NotificationSink, ConnectivitySource
"""

from relaynote.platform.base import (
    ConnectivitySource,
    DisplayOptions,
    NotificationHandle,
    NotificationSink,
)
from relaynote.platform.logging_sink import LoggingSink
from relaynote.platform.memory import ManualConnectivity, MemoryHandle, MemorySink

__all__ = [
    "ConnectivitySource",
    "DisplayOptions",
    "LoggingSink",
    "ManualConnectivity",
    "MemoryHandle",
    "MemorySink",
    "NotificationHandle",
    "NotificationSink",
]
