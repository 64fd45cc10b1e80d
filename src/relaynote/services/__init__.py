"""Engine services.

Public API::

    from relaynote.services import NotificationEngine

    engine = NotificationEngine(sink, store, scheduler)
    engine.show("Build finished", "All checks passed", type="system_success")
"""

from relaynote.services.deadlines import DeadlineScheduler
from relaynote.services.engine import NotificationEngine

__all__ = ["DeadlineScheduler", "NotificationEngine"]
