"""Swap Transitions — the (status, action) table and its derived views.

Tests cover:
    - ALLOWED_TRANSITIONS equals the documented lifecycle table
    - Terminal statuses admit no action
    - check_transition / check_status_change error dicts
"""

import pytest

from app.core.domain_types import SwapAction, SwapStatus
from app.core.swap_transitions import (
    ALLOWED_TRANSITIONS,
    can_transition_to,
    check_status_change,
    check_transition,
    is_terminal,
    next_status,
)


def test_allowed_transitions_table():
    assert ALLOWED_TRANSITIONS == {
        SwapStatus.PENDING: {
            SwapStatus.COUNTER_OFFER, SwapStatus.ACCEPTED, SwapStatus.CANCELLED,
        },
        SwapStatus.COUNTER_OFFER: {SwapStatus.ACCEPTED, SwapStatus.CANCELLED},
        SwapStatus.ACCEPTED: {SwapStatus.COMPLETED, SwapStatus.CANCELLED},
        SwapStatus.COMPLETED: set(),
        SwapStatus.CANCELLED: set(),
    }


def test_accepted_reachable_by_two_actions():
    assert next_status(SwapStatus.PENDING, SwapAction.ACCEPT) == SwapStatus.ACCEPTED
    assert (
        next_status(SwapStatus.COUNTER_OFFER, SwapAction.ACCEPT_COUNTER_OFFER)
        == SwapStatus.ACCEPTED
    )
    assert next_status(SwapStatus.COUNTER_OFFER, SwapAction.ACCEPT) is None


@pytest.mark.parametrize("status", [SwapStatus.COMPLETED, SwapStatus.CANCELLED])
@pytest.mark.parametrize("action", list(SwapAction))
def test_terminal_statuses_admit_no_action(status, action):
    assert is_terminal(status)
    assert next_status(status, action) is None
    assert check_transition(status, action)["error_code"] == "INVALID_TRANSITION"


def test_no_transition_back_to_pending():
    for status in SwapStatus:
        assert not can_transition_to(status, SwapStatus.PENDING)


def test_check_transition_passes_for_allowed_pair():
    assert check_transition(SwapStatus.ACCEPTED, SwapAction.CANCEL) is None


def test_check_transition_message_names_action_and_status():
    result = check_transition(SwapStatus.ACCEPTED, SwapAction.COUNTER_OFFER)
    assert result["status"] == "error"
    assert "counter offer" in result["message"]
    assert "ACCEPTED" in result["message"]


def test_check_status_change():
    assert check_status_change(SwapStatus.PENDING, SwapStatus.ACCEPTED) is None
    result = check_status_change(SwapStatus.CANCELLED, SwapStatus.ACCEPTED)
    assert result["error_code"] == "INVALID_TRANSITION"
