"""Swap Transitions — the single table-driven status transition function.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - _ACTION_TABLE is the only place a (status, action) pair maps to a next status
    - ALLOWED_TRANSITIONS is derived from _ACTION_TABLE, never maintained by hand
    - COMPLETED and CANCELLED are terminal: no action leaves them

Design Decisions:
    - Keyed by (current_status, action), not (current, target): ACCEPTED is reachable
      by two different actions with different permission rules
    - Return error dict on violation, None on success (same shape as the other enforce_* checks)
"""

from app.core.domain_types import SwapAction, SwapStatus, TERMINAL_STATUSES


_ACTION_TABLE: dict[tuple[SwapStatus, SwapAction], SwapStatus] = {
    (SwapStatus.PENDING, SwapAction.ACCEPT): SwapStatus.ACCEPTED,
    (SwapStatus.PENDING, SwapAction.COUNTER_OFFER): SwapStatus.COUNTER_OFFER,
    (SwapStatus.PENDING, SwapAction.CANCEL): SwapStatus.CANCELLED,
    (SwapStatus.COUNTER_OFFER, SwapAction.ACCEPT_COUNTER_OFFER): SwapStatus.ACCEPTED,
    (SwapStatus.COUNTER_OFFER, SwapAction.CANCEL): SwapStatus.CANCELLED,
    (SwapStatus.ACCEPTED, SwapAction.CANCEL): SwapStatus.CANCELLED,
    (SwapStatus.ACCEPTED, SwapAction.COMPLETE): SwapStatus.COMPLETED,
}


def _derive_allowed() -> dict[SwapStatus, frozenset[SwapStatus]]:
    allowed: dict[SwapStatus, set[SwapStatus]] = {s: set() for s in SwapStatus}
    for (current, _action), target in _ACTION_TABLE.items():
        allowed[current].add(target)
    return {s: frozenset(targets) for s, targets in allowed.items()}


ALLOWED_TRANSITIONS: dict[SwapStatus, frozenset[SwapStatus]] = _derive_allowed()


def next_status(current: SwapStatus, action: SwapAction) -> SwapStatus | None:
    """Status reached by applying action in current, or None if not allowed."""
    return _ACTION_TABLE.get((current, action))


def can_transition_to(current: SwapStatus, target: SwapStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def is_terminal(status: SwapStatus) -> bool:
    return status in TERMINAL_STATUSES


def check_transition(current: SwapStatus, action: SwapAction) -> dict | None:
    """Reject actions the current status does not allow."""
    if next_status(current, action) is None:
        return {
            "status": "error",
            "error_code": "INVALID_TRANSITION",
            "message": (
                f"Cannot {action.value.replace('_', ' ')} a swap "
                f"that is {current.value}."
            ),
        }
    return None


def check_status_change(current: SwapStatus, target: SwapStatus) -> dict | None:
    """Reject direct status changes outside the transition table."""
    if not can_transition_to(current, target):
        return {
            "status": "error",
            "error_code": "INVALID_TRANSITION",
            "message": (
                f"Cannot move a swap from {current.value} to {target.value}."
            ),
        }
    return None
