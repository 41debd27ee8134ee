"""Swap schemas — request bodies validated at the API boundary.

Invariants:
    - Messages are stripped; blank becomes None; max 1000 chars
    - rating is a strict integer 1–5 (no coercion from "4" or 4.0)
    - Status updates only accept known SwapStatus values
"""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from app.core.domain_types import SwapStatus
from app.schemas.swap import (
    CounterOfferCreate,
    SwapCompletionInput,
    SwapRequestCreate,
    SwapStatusUpdate,
    UserRatingResponse,
)


# --- SwapRequestCreate --------------------------------------------------------

def test_create_message_is_stripped():
    body = SwapRequestCreate(
        book_id=uuid4(), offered_book_id=uuid4(), message="  hello  ",
    )
    assert body.message == "hello"


def test_create_blank_message_becomes_none():
    body = SwapRequestCreate(
        book_id=uuid4(), offered_book_id=uuid4(), message="   ",
    )
    assert body.message is None


def test_create_message_max_length_enforced():
    with pytest.raises(ValidationError):
        SwapRequestCreate(
            book_id=uuid4(), offered_book_id=uuid4(), message="x" * 1001,
        )


def test_create_requires_offered_book():
    with pytest.raises(ValidationError):
        SwapRequestCreate(book_id=uuid4())


# --- CounterOfferCreate -------------------------------------------------------

def test_counter_offer_message_optional():
    body = CounterOfferCreate(counter_offered_book_id=uuid4())
    assert body.counter_offer_message is None


def test_counter_offer_rejects_non_uuid_book():
    with pytest.raises(ValidationError):
        CounterOfferCreate(counter_offered_book_id="book-7")


# --- SwapCompletionInput ------------------------------------------------------

@pytest.mark.parametrize("rating", [1, 3, 5])
def test_rating_in_range_accepted(rating):
    assert SwapCompletionInput(rating=rating).rating == rating


@pytest.mark.parametrize("rating", [0, 6, -1])
def test_rating_out_of_range_rejected(rating):
    with pytest.raises(ValidationError):
        SwapCompletionInput(rating=rating)


@pytest.mark.parametrize("rating", ["4", 4.0, 4.5])
def test_rating_is_not_coerced(rating):
    with pytest.raises(ValidationError):
        SwapCompletionInput(rating=rating)


def test_feedback_stripped_and_bounded():
    assert SwapCompletionInput(rating=4, feedback=" ok ").feedback == "ok"
    assert SwapCompletionInput(rating=4, feedback="").feedback is None
    with pytest.raises(ValidationError):
        SwapCompletionInput(rating=4, feedback="x" * 2001)


# --- SwapStatusUpdate ---------------------------------------------------------

def test_status_update_parses_enum():
    assert SwapStatusUpdate(status="CANCELLED").status == SwapStatus.CANCELLED


def test_status_update_rejects_unknown_status():
    with pytest.raises(ValidationError):
        SwapStatusUpdate(status="ARCHIVED")


# --- UserRatingResponse -------------------------------------------------------

def test_rating_breakdown_keys_serialize_as_strings():
    resp = UserRatingResponse(
        average_rating=4.5, total_ratings=2,
        ratings_breakdown={1: 0, 2: 0, 3: 0, 4: 1, 5: 1},
    )
    assert resp.model_dump(mode="json")["ratings_breakdown"]["5"] == 1
