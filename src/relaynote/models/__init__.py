"""Entity models for the relaynote delivery engine.

Content-bearing records are plain dataclasses.  Only
:class:`Notification` carries mutable lifecycle state, advanced through
:meth:`Notification.advance`.
"""

from relaynote.models.notification import (
    Batch,
    FailedEntry,
    Notification,
    NotificationAction,
    RetryRecord,
)
from relaynote.models.result import ShowResult
from relaynote.models.settings import AnalyticsCounters, NotificationSettings, QuietHours

__all__ = [
    "AnalyticsCounters",
    "Batch",
    "FailedEntry",
    "Notification",
    "NotificationAction",
    "NotificationSettings",
    "QuietHours",
    "RetryRecord",
    "ShowResult",
]
