"""Swap Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - Free-text messages: stripped, max 1000 chars, blank → None
    - SwapCompletionInput.rating is a strict integer 1–5 (no coercion from "4" or 4.0)
    - Responses are built from service dicts (derived fields included)

Design Decisions:
    - field_validator for side-effect-free transforms (strip) — keeps models pure
    - Rating bounds mirror core/completion.py; CompletionTracker re-checks for
      non-HTTP callers
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, StrictInt, field_validator

from app.core.completion import MAX_FEEDBACK_LENGTH
from app.core.domain_types import (
    CompletionProgress, SwapAction, SwapStatus, MIN_RATING, MAX_RATING,
)
from app.core.enforce_swap import MAX_MESSAGE_LENGTH


def _blank_to_none(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    return v or None


class SwapRequestCreate(BaseModel):
    """New swap request — requested book plus the book offered in exchange."""
    book_id: UUID
    offered_book_id: UUID
    message: str | None = Field(None, max_length=MAX_MESSAGE_LENGTH)

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class CounterOfferCreate(BaseModel):
    counter_offered_book_id: UUID
    counter_offer_message: str | None = Field(None, max_length=MAX_MESSAGE_LENGTH)

    @field_validator("counter_offer_message")
    @classmethod
    def strip_message(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class SwapStatusUpdate(BaseModel):
    """Generic status update (PUT /swaps/{id})."""
    status: SwapStatus


class SwapCompletionInput(BaseModel):
    rating: StrictInt = Field(ge=MIN_RATING, le=MAX_RATING)
    feedback: str | None = Field(None, max_length=MAX_FEEDBACK_LENGTH)

    @field_validator("feedback")
    @classmethod
    def strip_feedback(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class SwapRequestResponse(BaseModel):
    """Swap as seen by one of its parties."""
    id: UUID
    requester_id: UUID
    owner_id: UUID
    book_id: UUID
    offered_book_id: UUID
    counter_offered_book_id: UUID | None = None
    status: SwapStatus
    message: str | None = None
    counter_offer_message: str | None = None
    requester_completed_at: datetime | None = None
    owner_completed_at: datetime | None = None
    completed_at: datetime | None = None
    requester_rating: int | None = None
    owner_rating: int | None = None
    requester_feedback: str | None = None
    owner_feedback: str | None = None
    cancelled_by: UUID | None = None
    created_at: datetime
    updated_at: datetime

    # Derived, viewer-relative
    completion_progress: CompletionProgress
    completion_message: str | None = None
    pending_completion_user: UUID | None = None
    available_actions: list[SwapAction] = []
    requester_gets_book_id: UUID
    owner_gets_book_id: UUID


class SwapListResponse(BaseModel):
    incoming: list[SwapRequestResponse]
    outgoing: list[SwapRequestResponse]


class SwapCountsResponse(BaseModel):
    incoming_pending: int
    outgoing_pending: int


class SwapStatisticsResponse(BaseModel):
    total_swaps: int
    total_completed: int
    completion_rate: float
    average_rating: float


class UserRatingResponse(BaseModel):
    average_rating: float
    total_ratings: int
    ratings_breakdown: dict[int, int]
