"""Completion Rules — rating validation, precedence, derived progress and messages."""

import pytest

from app.core.completion import (
    check_completion,
    check_feedback,
    check_rating,
    completion_columns,
    completion_message,
    completion_progress,
    other_completion_column,
    pending_completion_user,
    progress_of,
    MAX_FEEDBACK_LENGTH,
)
from app.core.domain_types import CompletionProgress, PartyRole
from app.core.swap_state import swap_state_from_record
from tests.core.swap_records import (
    OWNER, REQUESTER, STRANGER, T0,
    accepted_row, completed_row, pending_row,
)


# ─── Rating / feedback ───────────────────────────────────────────

@pytest.mark.parametrize("rating", [1, 3, 5])
def test_valid_ratings_pass(rating):
    assert check_rating(rating) is None


@pytest.mark.parametrize("rating", [0, 6, -1, 3.5, "4", None, True])
def test_invalid_ratings_rejected(rating):
    result = check_rating(rating)
    assert result["error_code"] == "VALIDATION_ERROR"
    assert result["field"] == "rating"


def test_feedback_length_limit():
    assert check_feedback(None) is None
    assert check_feedback("x" * MAX_FEEDBACK_LENGTH) is None
    assert check_feedback("x" * (MAX_FEEDBACK_LENGTH + 1))["field"] == "feedback"


# ─── check_completion precedence ─────────────────────────────────

def test_not_accepted_checked_first():
    state = swap_state_from_record(pending_row())
    assert check_completion(state, STRANGER)["error_code"] == "NOT_ACCEPTED"


def test_completed_swap_is_not_accepted():
    state = swap_state_from_record(completed_row())
    assert check_completion(state, OWNER)["error_code"] == "NOT_ACCEPTED"


def test_non_party_forbidden():
    state = swap_state_from_record(accepted_row())
    assert check_completion(state, STRANGER)["error_code"] == "FORBIDDEN"


def test_repeat_confirmation_rejected():
    state = swap_state_from_record(accepted_row(requester_done=True))
    assert check_completion(state, REQUESTER)["error_code"] == "ALREADY_COMPLETED"
    assert check_completion(state, OWNER) is None


# ─── Columns ─────────────────────────────────────────────────────

def test_completion_columns_are_disjoint_per_role():
    requester_cols = completion_columns(PartyRole.REQUESTER, T0, 5, "great")
    owner_cols = completion_columns(PartyRole.OWNER, T0, 4, None)
    assert requester_cols == {
        "requester_completed_at": T0,
        "requester_rating": 5,
        "requester_feedback": "great",
    }
    assert not set(requester_cols) & set(owner_cols)
    assert other_completion_column(PartyRole.OWNER) == "requester_completed_at"


# ─── Derived progress ────────────────────────────────────────────

@pytest.mark.parametrize("requester_at, owner_at, expected", [
    (None, None, CompletionProgress.AWAITING_BOTH),
    (T0, None, CompletionProgress.AWAITING_OWNER),
    (None, T0, CompletionProgress.AWAITING_REQUESTER),
    (T0, T0, CompletionProgress.FULLY_COMPLETED),
])
def test_completion_progress_table(requester_at, owner_at, expected):
    assert completion_progress(requester_at, owner_at) == expected


def test_progress_of_completed_swap():
    state = swap_state_from_record(completed_row())
    assert progress_of(state) == CompletionProgress.FULLY_COMPLETED
    assert pending_completion_user(state) is None


def test_pending_completion_user():
    state = swap_state_from_record(accepted_row(owner_done=True))
    assert pending_completion_user(state) == REQUESTER
    state = swap_state_from_record(accepted_row())
    assert pending_completion_user(state) is None


def test_completion_message_is_viewer_relative():
    state = swap_state_from_record(accepted_row(requester_done=True))
    assert completion_message(state, REQUESTER).startswith("Waiting for the other")
    assert "Please confirm" in completion_message(state, OWNER)
    assert completion_message(state, STRANGER) is None


def test_completion_message_outside_accepted():
    assert completion_message(swap_state_from_record(pending_row()), OWNER) is None
    assert completion_message(
        swap_state_from_record(accepted_row()), OWNER,
    ).startswith("Both parties")
