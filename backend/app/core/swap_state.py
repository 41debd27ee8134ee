"""Swap State — one frozen variant per status, parsed from a persisted row.

Invariants:
    - Each variant carries only the fields meaningful to its status
    - swap_state_from_record rejects rows that break a swap invariant (SwapInvariantError)
    - Completed always holds both party confirmations; Accepted never holds both
    - Cancelled always knows who cancelled, and it is one of the two parties

Design Decisions:
    - Variants over one nullable record: representable-but-invalid states are unrepresentable
      once parsed, so PermissionGate predicates need no null-juggling
    - Parsing lives in core (pure) and takes a SwapRecord Protocol, not the ORM class
"""

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Union
from uuid import UUID

from app.core.domain_types import (
    BookId, PartyRole, SwapId, SwapStatus, UserId, MIN_RATING, MAX_RATING,
)
from app.core.errors import ErrorContext, SwapInvariantError
from app.core.repository_protocols import SwapRecord


@dataclass(frozen=True)
class SwapParties:
    """Identity fields shared by every variant."""
    swap_id: SwapId
    requester_id: UserId
    owner_id: UserId
    book_id: BookId
    offered_book_id: BookId

    def role_of(self, user_id: UUID) -> PartyRole | None:
        if user_id == self.requester_id:
            return PartyRole.REQUESTER
        if user_id == self.owner_id:
            return PartyRole.OWNER
        return None

    def is_party(self, user_id: UUID) -> bool:
        return self.role_of(user_id) is not None

    def counterpart_of(self, user_id: UUID) -> UserId | None:
        role = self.role_of(user_id)
        if role == PartyRole.REQUESTER:
            return self.owner_id
        if role == PartyRole.OWNER:
            return self.requester_id
        return None


@dataclass(frozen=True)
class PartyCompletion:
    """One party's confirmation that the physical exchange happened."""
    completed_at: datetime
    rating: int | None
    feedback: str | None


@dataclass(frozen=True)
class Pending:
    status: ClassVar[SwapStatus] = SwapStatus.PENDING
    parties: SwapParties
    message: str | None = None


@dataclass(frozen=True)
class CounterOffered:
    status: ClassVar[SwapStatus] = SwapStatus.COUNTER_OFFER
    parties: SwapParties
    counter_offered_book_id: BookId
    message: str | None = None
    counter_offer_message: str | None = None


@dataclass(frozen=True)
class Accepted:
    status: ClassVar[SwapStatus] = SwapStatus.ACCEPTED
    parties: SwapParties
    counter_offered_book_id: BookId | None = None
    requester_completion: PartyCompletion | None = None
    owner_completion: PartyCompletion | None = None

    def completion_for(self, role: PartyRole) -> PartyCompletion | None:
        if role == PartyRole.REQUESTER:
            return self.requester_completion
        return self.owner_completion


@dataclass(frozen=True)
class Completed:
    status: ClassVar[SwapStatus] = SwapStatus.COMPLETED
    parties: SwapParties
    requester_completion: PartyCompletion
    owner_completion: PartyCompletion
    completed_at: datetime
    counter_offered_book_id: BookId | None = None


@dataclass(frozen=True)
class Cancelled:
    status: ClassVar[SwapStatus] = SwapStatus.CANCELLED
    parties: SwapParties
    cancelled_by: UserId
    counter_offered_book_id: BookId | None = None
    requester_completion: PartyCompletion | None = None
    owner_completion: PartyCompletion | None = None


SwapState = Union[Pending, CounterOffered, Accepted, Completed, Cancelled]


# ─── Parsing ─────────────────────────────────────────────────────

def swap_state_from_record(record: SwapRecord) -> SwapState:
    """Parse a persisted row into its status variant. Raises SwapInvariantError."""
    context = ErrorContext(swap_id=record.id)

    def violated(reason: str) -> SwapInvariantError:
        return SwapInvariantError(f"Swap {record.id}: {reason}", context)

    if record.requester_id == record.owner_id:
        raise violated("requester and owner are the same user")
    try:
        status = SwapStatus(record.status)
    except ValueError:
        raise violated(f"unknown status {record.status!r}")

    parties = SwapParties(
        swap_id=SwapId(record.id),
        requester_id=UserId(record.requester_id),
        owner_id=UserId(record.owner_id),
        book_id=BookId(record.book_id),
        offered_book_id=BookId(record.offered_book_id),
    )
    requester_completion = _completion(
        record.requester_completed_at, record.requester_rating,
        record.requester_feedback, violated,
    )
    owner_completion = _completion(
        record.owner_completed_at, record.owner_rating,
        record.owner_feedback, violated,
    )
    both_completed = requester_completion is not None and owner_completion is not None

    if (record.completed_at is not None) != both_completed:
        raise violated("completed_at disagrees with party completions")
    if (record.cancelled_by is not None) != (status == SwapStatus.CANCELLED):
        raise violated("cancelled_by disagrees with status")

    if status == SwapStatus.PENDING:
        if record.counter_offered_book_id is not None:
            raise violated("pending swap carries a counter-offer")
        if requester_completion or owner_completion:
            raise violated("pending swap carries a completion")
        return Pending(parties=parties, message=record.message)

    if status == SwapStatus.COUNTER_OFFER:
        if record.counter_offered_book_id is None:
            raise violated("counter-offer without counter_offered_book_id")
        if requester_completion or owner_completion:
            raise violated("counter-offer carries a completion")
        return CounterOffered(
            parties=parties,
            counter_offered_book_id=BookId(record.counter_offered_book_id),
            message=record.message,
            counter_offer_message=record.counter_offer_message,
        )

    if status == SwapStatus.ACCEPTED:
        if both_completed:
            raise violated("both parties completed but status is ACCEPTED")
        return Accepted(
            parties=parties,
            counter_offered_book_id=record.counter_offered_book_id,
            requester_completion=requester_completion,
            owner_completion=owner_completion,
        )

    if status == SwapStatus.COMPLETED:
        if not both_completed:
            raise violated("COMPLETED without both party completions")
        return Completed(
            parties=parties,
            requester_completion=requester_completion,
            owner_completion=owner_completion,
            completed_at=record.completed_at,
            counter_offered_book_id=record.counter_offered_book_id,
        )

    if not parties.is_party(record.cancelled_by):
        raise violated("cancelled_by is not a party to the swap")
    return Cancelled(
        parties=parties,
        cancelled_by=UserId(record.cancelled_by),
        counter_offered_book_id=record.counter_offered_book_id,
        requester_completion=requester_completion,
        owner_completion=owner_completion,
    )


def _completion(completed_at, rating, feedback, violated) -> PartyCompletion | None:
    if rating is not None and not (
        isinstance(rating, int) and MIN_RATING <= rating <= MAX_RATING
    ):
        raise violated(f"rating {rating!r} outside {MIN_RATING}-{MAX_RATING}")
    if completed_at is None:
        if rating is not None or feedback is not None:
            raise violated("rating or feedback without a completion timestamp")
        return None
    return PartyCompletion(completed_at=completed_at, rating=rating, feedback=feedback)


# ─── Derived views ───────────────────────────────────────────────

def exchanged_books(state: SwapState) -> dict[str, BookId]:
    """Which book each party walks away with.

    After a counter-offer the requester receives the owner's substitute
    instead of the originally requested book.
    """
    parties = state.parties
    counter = getattr(state, "counter_offered_book_id", None)
    requester_gets = (
        counter if counter is not None and state.status != SwapStatus.PENDING
        else parties.book_id
    )
    return {
        "requester_gets": requester_gets,
        "owner_gets": parties.offered_book_id,
    }


def reserved_books(state: SwapState) -> list[BookId]:
    """Books held unavailable while this swap is open."""
    return list(exchanged_books(state).values())
