"""Exception hierarchy for relaynote.

Only :class:`PlatformUnsupportedError` ever reaches callers of the
engine, and only from :meth:`NotificationEngine.request_permission`.
Everything raised during :meth:`NotificationEngine.show` is converted
into a :class:`~relaynote.models.result.ShowResult`.
"""

from __future__ import annotations


class RelaynoteError(Exception):
    """Base class for all relaynote errors."""


class PlatformUnsupportedError(RelaynoteError):
    """The host has no notification surface."""

    def __init__(self, detail: str = "Notifications not supported on this platform") -> None:
        self.detail = detail
        super().__init__(detail)


class DisplayError(RelaynoteError):
    """Raised by sinks when the platform fails to display a notification.

    Parameters
    ----------
    detail:
        Human-readable description of the failure.
    retryable:
        Whether the failure is transient and the display may be retried.

    """

    def __init__(self, detail: str, *, retryable: bool = True) -> None:
        self.detail = detail
        self.retryable = retryable
        super().__init__(detail)


class PermissionDeniedError(DisplayError):
    """Raised by a sink asked to display without permission."""

    def __init__(self, detail: str = "Notification permission not granted") -> None:
        super().__init__(detail, retryable=False)
