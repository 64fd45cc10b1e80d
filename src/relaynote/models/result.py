"""Return shape of the engine's public delivery calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

NO_PERMISSION = "No permission"
OFFLINE = "Offline"
QUIET_HOURS = "Quiet hours"
DESKTOP_DISABLED = "Desktop notifications disabled"
UNSUPPORTED = "Notifications not supported on this platform"


@dataclass(frozen=True)
class ShowResult:
    """Outcome of :meth:`NotificationEngine.show` / ``show_immediate``.

    ``success`` with ``batched`` or ``queued`` means the notification was
    accepted but delivery completes later.
    """

    success: bool
    batched: bool = False
    queued: bool = False
    reason: str | None = None
    error: str | None = None
    notification_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success}
        if self.batched:
            out["batched"] = True
        if self.queued:
            out["queued"] = True
        if self.reason is not None:
            out["reason"] = self.reason
        if self.error is not None:
            out["error"] = self.error
        return out
