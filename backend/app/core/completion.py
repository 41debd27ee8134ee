"""Completion Rules — dual-confirmation protocol layered on the ACCEPTED state.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - check_completion precedence: NOT_ACCEPTED → FORBIDDEN → ALREADY_COMPLETED
    - A repeated confirmation by the same party is rejected, never silently accepted
    - completion_columns touches only the actor's own columns (disjoint per party)

Design Decisions:
    - Rating validation separate from state checks: it is input validation and runs
      before the store is read
    - Derived progress from the two timestamps only; status is not consulted, so
      the same table serves ACCEPTED, COMPLETED and CANCELLED rows
"""

from datetime import datetime
from uuid import UUID

from app.core.domain_types import (
    CompletionProgress, PartyRole, UserId, MIN_RATING, MAX_RATING,
)
from app.core.enforce_swap import can_complete
from app.core.swap_state import Accepted, SwapState


MAX_FEEDBACK_LENGTH = 2000

# Column names written per role — the CAS adapter asserts the timestamp is NULL
COMPLETION_COLUMNS = {
    PartyRole.REQUESTER: (
        "requester_completed_at", "requester_rating", "requester_feedback",
    ),
    PartyRole.OWNER: (
        "owner_completed_at", "owner_rating", "owner_feedback",
    ),
}


def check_rating(rating: object) -> dict | None:
    """Rating must be an integer in [1, 5]."""
    if (
        isinstance(rating, bool)
        or not isinstance(rating, int)
        or not MIN_RATING <= rating <= MAX_RATING
    ):
        return {
            "status": "error",
            "error_code": "VALIDATION_ERROR",
            "field": "rating",
            "message": f"Rating must be a whole number from {MIN_RATING} to {MAX_RATING}.",
        }
    return None


def check_feedback(feedback: str | None) -> dict | None:
    if feedback is not None and len(feedback) > MAX_FEEDBACK_LENGTH:
        return {
            "status": "error",
            "error_code": "VALIDATION_ERROR",
            "field": "feedback",
            "message": f"Feedback must be {MAX_FEEDBACK_LENGTH} characters or less.",
        }
    return None


def check_completion(state: SwapState, user_id: UUID) -> dict | None:
    """Validate a completion attempt against the current snapshot."""
    if can_complete(state, user_id):
        return None
    if not isinstance(state, Accepted):
        return {
            "status": "error",
            "error_code": "NOT_ACCEPTED",
            "message": "Only accepted swaps can be completed.",
        }
    if not state.parties.is_party(user_id):
        return {
            "status": "error",
            "error_code": "FORBIDDEN",
            "message": "Only swap participants can mark a swap as completed.",
        }
    return {
        "status": "error",
        "error_code": "ALREADY_COMPLETED",
        "message": "You have already marked this swap as completed.",
    }


def completion_columns(
    role: PartyRole, now: datetime, rating: int, feedback: str | None,
) -> dict:
    """Column values recording one party's confirmation."""
    completed_at_col, rating_col, feedback_col = COMPLETION_COLUMNS[role]
    return {
        completed_at_col: now,
        rating_col: rating,
        feedback_col: feedback,
    }


def other_completion_column(role: PartyRole) -> str:
    other = PartyRole.OWNER if role == PartyRole.REQUESTER else PartyRole.REQUESTER
    return COMPLETION_COLUMNS[other][0]


def completion_progress(
    requester_completed_at: datetime | None,
    owner_completed_at: datetime | None,
) -> CompletionProgress:
    if requester_completed_at is None and owner_completed_at is None:
        return CompletionProgress.AWAITING_BOTH
    if owner_completed_at is None:
        return CompletionProgress.AWAITING_OWNER
    if requester_completed_at is None:
        return CompletionProgress.AWAITING_REQUESTER
    return CompletionProgress.FULLY_COMPLETED


def progress_of(state: SwapState) -> CompletionProgress:
    requester = getattr(state, "requester_completion", None)
    owner = getattr(state, "owner_completion", None)
    return completion_progress(
        requester.completed_at if requester else None,
        owner.completed_at if owner else None,
    )


def pending_completion_user(state: SwapState) -> UserId | None:
    """The party whose confirmation is still missing after the other confirmed."""
    progress = progress_of(state)
    if progress == CompletionProgress.AWAITING_OWNER:
        return state.parties.owner_id
    if progress == CompletionProgress.AWAITING_REQUESTER:
        return state.parties.requester_id
    return None


def completion_message(state: SwapState, viewer_id: UUID) -> str | None:
    """Viewer-relative status line; None outside ACCEPTED or for non-parties."""
    if not isinstance(state, Accepted):
        return None
    role = state.parties.role_of(viewer_id)
    if role is None:
        return None
    other = PartyRole.OWNER if role == PartyRole.REQUESTER else PartyRole.REQUESTER
    mine = state.completion_for(role) is not None
    theirs = state.completion_for(other) is not None
    if mine and not theirs:
        return "Waiting for the other party to mark as completed."
    if theirs and not mine:
        return (
            "The other party has marked as completed. "
            "Please confirm your completion."
        )
    return "Both parties need to mark the swap as completed."
