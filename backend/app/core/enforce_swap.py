"""Swap Permission Gate — who may do what, given the current swap state.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - can_* predicates are the single source of truth for authorization
    - check_* returns None iff the matching can_* predicate holds; otherwise an
      error dict explaining why (first failing reason wins)
    - Read-time precedence: non-party → FORBIDDEN, wrong status → INVALID_TRANSITION,
      wrong role → FORBIDDEN

Design Decisions:
    - Predicates take the parsed SwapState variant: isinstance replaces string compares
    - check_* never re-implements the rule — it defers to can_* and only diagnoses
      the refusal, so UI affordance and server enforcement cannot drift
    - Return dicts (not exceptions): services map them via error_from_violation
"""

from uuid import UUID

from app.core.domain_types import PartyRole, SwapAction
from app.core.repository_protocols import BookInfo
from app.core.swap_state import (
    Accepted, CounterOffered, Pending, SwapState,
)
from app.core.swap_transitions import check_transition, is_terminal


# ─── Predicates ──────────────────────────────────────────────────

def can_cancel(state: SwapState, user_id: UUID) -> bool:
    return not is_terminal(state.status) and state.parties.is_party(user_id)


def can_accept(state: SwapState, user_id: UUID) -> bool:
    return isinstance(state, Pending) and user_id == state.parties.owner_id


def can_counter_offer(state: SwapState, user_id: UUID) -> bool:
    return isinstance(state, Pending) and user_id == state.parties.owner_id


def can_accept_counter_offer(state: SwapState, user_id: UUID) -> bool:
    return (
        isinstance(state, CounterOffered)
        and user_id == state.parties.requester_id
    )


def can_complete(state: SwapState, user_id: UUID) -> bool:
    if not isinstance(state, Accepted):
        return False
    role = state.parties.role_of(user_id)
    return role is not None and state.completion_for(role) is None


_PREDICATES = {
    SwapAction.CANCEL: can_cancel,
    SwapAction.ACCEPT: can_accept,
    SwapAction.COUNTER_OFFER: can_counter_offer,
    SwapAction.ACCEPT_COUNTER_OFFER: can_accept_counter_offer,
    SwapAction.COMPLETE: can_complete,
}

# Role each action requires; None means either party
_REQUIRED_ROLE = {
    SwapAction.CANCEL: None,
    SwapAction.ACCEPT: PartyRole.OWNER,
    SwapAction.COUNTER_OFFER: PartyRole.OWNER,
    SwapAction.ACCEPT_COUNTER_OFFER: PartyRole.REQUESTER,
}

_ROLE_MESSAGES = {
    SwapAction.ACCEPT: "Only the book owner can accept a pending request.",
    SwapAction.COUNTER_OFFER: "Only the book owner can make a counter-offer.",
    SwapAction.ACCEPT_COUNTER_OFFER: "Only the requester can accept a counter-offer.",
}


def is_allowed(state: SwapState, user_id: UUID, action: SwapAction) -> bool:
    return _PREDICATES[action](state, user_id)


def available_actions(state: SwapState, user_id: UUID) -> list[SwapAction]:
    """Actions this user may take right now, in display order."""
    return [
        action for action in (
            SwapAction.CANCEL,
            SwapAction.ACCEPT,
            SwapAction.COUNTER_OFFER,
            SwapAction.ACCEPT_COUNTER_OFFER,
            SwapAction.COMPLETE,
        )
        if is_allowed(state, user_id, action)
    ]


# ─── Checks (diagnose refusals) ──────────────────────────────────

def check_action(
    state: SwapState, user_id: UUID, action: SwapAction,
) -> dict | None:
    """Validate a lifecycle action (not COMPLETE — see core/completion.py)."""
    if is_allowed(state, user_id, action):
        return None
    if not state.parties.is_party(user_id):
        return _forbidden("Only swap participants can act on this request.")
    transition_error = check_transition(state.status, action)
    if transition_error:
        return transition_error
    if _REQUIRED_ROLE.get(action) is not None:
        return _forbidden(_ROLE_MESSAGES[action])
    # Predicate refused for a reason the table does not explain
    return _forbidden("This action is not permitted.")


def _forbidden(message: str) -> dict:
    return {
        "status": "error",
        "error_code": "FORBIDDEN",
        "message": message,
    }


# ─── Request intake (books resolved by the shell) ────────────────

MAX_MESSAGE_LENGTH = 1000


def check_message(message: str | None, field: str = "message") -> dict | None:
    if message is not None and len(message) > MAX_MESSAGE_LENGTH:
        return {
            "status": "error",
            "error_code": "VALIDATION_ERROR",
            "field": field,
            "message": f"Message must be {MAX_MESSAGE_LENGTH} characters or less.",
        }
    return None


def check_swap_request(
    requester_id: UUID, book: BookInfo, offered_book: BookInfo,
) -> dict | None:
    """Validate a new request: NOT_AVAILABLE → OWN_BOOK → offered-book rules."""
    if not book.is_available:
        return _not_available("This book is not available for swap requests.")
    if book.owner_id == requester_id:
        return {
            "status": "error",
            "error_code": "OWN_BOOK",
            "message": "You cannot request a swap for your own book.",
        }
    if offered_book.owner_id != requester_id:
        return _forbidden("You can only offer books that you own.")
    if not offered_book.is_available:
        return _not_available("The offered book is not available.")
    return None


def check_counter_book(owner_id: UUID, counter_book: BookInfo) -> dict | None:
    """A counter-offer must propose one of the owner's own available books."""
    if counter_book.owner_id != owner_id:
        return _forbidden("You can only counter-offer with books that you own.")
    if not counter_book.is_available:
        return _not_available("The counter-offered book is not available.")
    return None


def _not_available(message: str) -> dict:
    return {
        "status": "error",
        "error_code": "NOT_AVAILABLE",
        "message": message,
    }
