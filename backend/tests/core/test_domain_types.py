"""Domain Types — verifies rich type definitions and enum values.

Tests:
    - NewType wrappers exist and are callable
    - SwapStatus values match the persisted status strings
    - Terminal set is exactly COMPLETED + CANCELLED
"""

from uuid import uuid4

from app.core.domain_types import (
    SwapId, UserId, BookId, Rating, MIN_RATING, MAX_RATING,
    SwapStatus, SwapAction, CompletionProgress, NotificationType,
    TERMINAL_STATUSES,
)


def test_identity_types_wrap_uuid():
    uid = uuid4()
    assert SwapId(uid) == uid
    assert UserId(uid) == uid
    assert BookId(uid) == uid


def test_rating_bounds():
    assert Rating(3) == 3
    assert (MIN_RATING, MAX_RATING) == (1, 5)


def test_swap_status_has_five_states():
    assert [s.value for s in SwapStatus] == [
        "PENDING", "COUNTER_OFFER", "ACCEPTED", "COMPLETED", "CANCELLED",
    ]


def test_status_is_str_enum():
    assert SwapStatus.PENDING == "PENDING"
    assert SwapStatus("COUNTER_OFFER") is SwapStatus.COUNTER_OFFER


def test_terminal_statuses():
    assert TERMINAL_STATUSES == {SwapStatus.COMPLETED, SwapStatus.CANCELLED}


def test_actions_and_progress_members():
    assert len(SwapAction) == 5
    assert CompletionProgress.AWAITING_BOTH.value == "awaiting_both"
    assert CompletionProgress.FULLY_COMPLETED.value == "fully_completed"


def test_notification_types():
    assert {t.value for t in NotificationType} == {
        "SWAP_REQUEST", "SWAP_ACCEPTED", "SWAP_COUNTER_OFFER",
        "SWAP_CANCELLED", "SWAP_COMPLETED",
    }
