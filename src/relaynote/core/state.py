"""Notification lifecycle state machine.

Defines the valid status transitions for a notification from creation
to a terminal state.  All transitions are enforced via
:func:`assert_transition`.

Usage::

    from relaynote.core.state import assert_transition
    from relaynote.core.types import NotificationState

    assert_transition(NotificationState.PENDING, NotificationState.BATCHED)
"""

from __future__ import annotations

import logging

from relaynote.core.types import NotificationState

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# pending → batched/deferred/queued/delivering
# delivering → delivered/retrying/queued (offline or no permission),
#   or failed when the platform error is not retryable
# retrying → delivering (next attempt) or failed (exhausted)
# delivered → clicked/dismissed, or retrying/failed on a late platform error
# failed, clicked & dismissed are terminal.
# ---------------------------------------------------------------------------

NOTIFICATION_TRANSITIONS: dict[NotificationState, frozenset[NotificationState]] = {
    NotificationState.PENDING: frozenset(
        {
            NotificationState.BATCHED,
            NotificationState.DEFERRED,
            NotificationState.QUEUED,
            NotificationState.DELIVERING,
        }
    ),
    NotificationState.BATCHED: frozenset(
        {
            NotificationState.DELIVERING,
            NotificationState.QUEUED,
        }
    ),
    NotificationState.DEFERRED: frozenset(
        {
            NotificationState.BATCHED,
            NotificationState.QUEUED,
            NotificationState.DELIVERING,
        }
    ),
    NotificationState.QUEUED: frozenset(
        {
            NotificationState.DELIVERING,
            NotificationState.QUEUED,  # re-queued while still undeliverable
        }
    ),
    NotificationState.DELIVERING: frozenset(
        {
            NotificationState.DELIVERED,
            NotificationState.RETRYING,
            NotificationState.QUEUED,
            NotificationState.FAILED,
        }
    ),
    NotificationState.RETRYING: frozenset(
        {
            NotificationState.DELIVERING,
            NotificationState.FAILED,
        }
    ),
    NotificationState.DELIVERED: frozenset(
        {
            NotificationState.CLICKED,
            NotificationState.DISMISSED,
            NotificationState.RETRYING,
            NotificationState.FAILED,
        }
    ),
    NotificationState.FAILED: frozenset(),
    NotificationState.CLICKED: frozenset(),
    NotificationState.DISMISSED: frozenset(),
}

TERMINAL_STATES = frozenset(
    state for state, targets in NOTIFICATION_TRANSITIONS.items() if not targets
)


def can_transition(current: NotificationState, target: NotificationState) -> bool:
    return target in NOTIFICATION_TRANSITIONS.get(current, frozenset())


def assert_transition(current: NotificationState, target: NotificationState) -> None:
    """Raise :class:`ValueError` if *current* → *target* is not allowed."""
    allowed = NOTIFICATION_TRANSITIONS.get(current)
    if allowed is None:
        msg = f"Unknown status {current!r}"
        raise ValueError(msg)
    if target not in allowed:
        msg = (
            f"Invalid transition {current.value!r} -> {target.value!r}; "
            f"allowed targets: {sorted(s.value for s in allowed) or '(terminal)'}"
        )
        raise ValueError(msg)


def log_transition(
    notification_id: str,
    from_status: NotificationState,
    to_status: NotificationState,
    *,
    reason: str | None = None,
) -> None:
    """Emit a structured debug log entry for a lifecycle transition."""
    extra = {
        "event": "state_transition",
        "notification_id": notification_id,
        "from_status": from_status.value,
        "to_status": to_status.value,
    }
    if reason:
        extra["reason"] = reason
    log.debug(
        "notification %s: %s -> %s%s",
        notification_id,
        from_status.value,
        to_status.value,
        f" ({reason})" if reason else "",
        extra=extra,
    )
