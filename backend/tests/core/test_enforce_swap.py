"""Swap Permission Gate — predicates, diagnosis precedence, request intake.

Tests cover:
    - check_action returns None iff the matching can_* predicate holds (every state × actor)
    - Precedence: non-party FORBIDDEN before INVALID_TRANSITION before role FORBIDDEN
    - available_actions per viewer
    - check_swap_request / check_counter_book rules and order
    - check_message length bound
"""

from uuid import uuid4

import pytest

from app.core.domain_types import SwapAction
from app.core.enforce_swap import (
    available_actions,
    can_accept,
    can_accept_counter_offer,
    can_cancel,
    can_complete,
    can_counter_offer,
    check_action,
    check_counter_book,
    check_message,
    check_swap_request,
    is_allowed,
)
from app.core.repository_protocols import BookInfo
from app.core.swap_state import swap_state_from_record
from tests.core.swap_records import (
    OWNER, REQUESTER, STRANGER,
    accepted_row, cancelled_row, completed_row, counter_row, pending_row,
)

STATES = {
    "pending": swap_state_from_record(pending_row()),
    "counter": swap_state_from_record(counter_row()),
    "accepted": swap_state_from_record(accepted_row()),
    "accepted_requester_done": swap_state_from_record(
        accepted_row(requester_done=True),
    ),
    "completed": swap_state_from_record(completed_row()),
    "cancelled": swap_state_from_record(cancelled_row()),
}
ACTORS = {"requester": REQUESTER, "owner": OWNER, "stranger": STRANGER}
LIFECYCLE_ACTIONS = [
    SwapAction.ACCEPT,
    SwapAction.COUNTER_OFFER,
    SwapAction.ACCEPT_COUNTER_OFFER,
    SwapAction.CANCEL,
]


@pytest.mark.parametrize("state_name", list(STATES))
@pytest.mark.parametrize("actor_name", list(ACTORS))
@pytest.mark.parametrize("action", LIFECYCLE_ACTIONS)
def test_check_action_agrees_with_predicate(state_name, actor_name, action):
    state, actor = STATES[state_name], ACTORS[actor_name]
    allowed = is_allowed(state, actor, action)
    result = check_action(state, actor, action)
    assert (result is None) == allowed
    if result is not None:
        assert result["error_code"] in ("FORBIDDEN", "INVALID_TRANSITION")


# ─── Predicates ──────────────────────────────────────────────────

def test_only_owner_accepts_or_counters_pending():
    state = STATES["pending"]
    assert can_accept(state, OWNER)
    assert can_counter_offer(state, OWNER)
    assert not can_accept(state, REQUESTER)
    assert not can_counter_offer(state, REQUESTER)


def test_only_requester_accepts_counter_offer():
    state = STATES["counter"]
    assert can_accept_counter_offer(state, REQUESTER)
    assert not can_accept_counter_offer(state, OWNER)
    assert not can_accept(state, OWNER)


def test_either_party_cancels_open_swaps():
    for name in ("pending", "counter", "accepted"):
        assert can_cancel(STATES[name], REQUESTER)
        assert can_cancel(STATES[name], OWNER)
        assert not can_cancel(STATES[name], STRANGER)


def test_terminal_swaps_cannot_be_cancelled():
    assert not can_cancel(STATES["completed"], OWNER)
    assert not can_cancel(STATES["cancelled"], REQUESTER)


def test_can_complete_once_per_party():
    state = STATES["accepted_requester_done"]
    assert not can_complete(state, REQUESTER)
    assert can_complete(state, OWNER)
    assert not can_complete(state, STRANGER)
    assert not can_complete(STATES["pending"], OWNER)


# ─── Precedence ──────────────────────────────────────────────────

def test_stranger_gets_forbidden_even_on_wrong_status():
    result = check_action(STATES["completed"], STRANGER, SwapAction.ACCEPT)
    assert result["error_code"] == "FORBIDDEN"


def test_wrong_status_beats_wrong_role():
    # Requester tries to accept an ACCEPTED swap: status is checked first
    result = check_action(STATES["accepted"], REQUESTER, SwapAction.ACCEPT)
    assert result["error_code"] == "INVALID_TRANSITION"


def test_wrong_role_on_right_status_is_forbidden():
    result = check_action(STATES["pending"], REQUESTER, SwapAction.ACCEPT)
    assert result["error_code"] == "FORBIDDEN"
    assert "owner" in result["message"]


def test_cancel_on_cancelled_is_invalid_transition():
    result = check_action(STATES["cancelled"], OWNER, SwapAction.CANCEL)
    assert result["error_code"] == "INVALID_TRANSITION"


# ─── available_actions ───────────────────────────────────────────

def test_available_actions_for_pending():
    assert available_actions(STATES["pending"], OWNER) == [
        SwapAction.CANCEL, SwapAction.ACCEPT, SwapAction.COUNTER_OFFER,
    ]
    assert available_actions(STATES["pending"], REQUESTER) == [SwapAction.CANCEL]
    assert available_actions(STATES["pending"], STRANGER) == []


def test_available_actions_after_own_completion():
    state = STATES["accepted_requester_done"]
    assert available_actions(state, REQUESTER) == [SwapAction.CANCEL]
    assert available_actions(state, OWNER) == [
        SwapAction.CANCEL, SwapAction.COMPLETE,
    ]


def test_terminal_swaps_offer_nothing():
    for name in ("completed", "cancelled"):
        for actor in ACTORS.values():
            assert available_actions(STATES[name], actor) == []


# ─── Request intake ──────────────────────────────────────────────

def _book(owner, available=True):
    return BookInfo(id=uuid4(), owner_id=owner, is_available=available)


def test_valid_request_passes():
    assert check_swap_request(
        REQUESTER, _book(OWNER), _book(REQUESTER),
    ) is None


def test_unavailable_book_checked_before_own_book():
    result = check_swap_request(
        REQUESTER, _book(REQUESTER, available=False), _book(REQUESTER),
    )
    assert result["error_code"] == "NOT_AVAILABLE"


def test_own_book_rejected():
    result = check_swap_request(REQUESTER, _book(REQUESTER), _book(REQUESTER))
    assert result["error_code"] == "OWN_BOOK"


def test_offered_book_must_belong_to_requester():
    result = check_swap_request(REQUESTER, _book(OWNER), _book(STRANGER))
    assert result["error_code"] == "FORBIDDEN"


def test_offered_book_must_be_available():
    result = check_swap_request(
        REQUESTER, _book(OWNER), _book(REQUESTER, available=False),
    )
    assert result["error_code"] == "NOT_AVAILABLE"


def test_counter_book_rules():
    assert check_counter_book(OWNER, _book(OWNER)) is None
    assert check_counter_book(OWNER, _book(REQUESTER))["error_code"] == "FORBIDDEN"
    assert (
        check_counter_book(OWNER, _book(OWNER, available=False))["error_code"]
        == "NOT_AVAILABLE"
    )


def test_message_length_bound():
    assert check_message(None) is None
    assert check_message("x" * 1000) is None
    result = check_message("x" * 1001)
    assert result["error_code"] == "VALIDATION_ERROR"
    assert result["field"] == "message"


def test_message_check_names_the_field():
    result = check_message("x" * 1001, "counter_offer_message")
    assert result["field"] == "counter_offer_message"
