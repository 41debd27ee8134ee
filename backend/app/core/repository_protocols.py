"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves —
      the shell orchestrates the async calls around the pure logic
    - SwapRecord mirrors the ORM columns so core can parse rows without importing models/
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from app.core.domain_types import BookId, UserId
from app.core.swap_events import SwapEvent


class SwapRecord(Protocol):
    """Structural contract for a persisted swap row (ORM model or test double)."""
    id: UUID
    requester_id: UUID
    owner_id: UUID
    book_id: UUID
    offered_book_id: UUID
    counter_offered_book_id: UUID | None
    status: str
    message: str | None
    counter_offer_message: str | None
    requester_completed_at: datetime | None
    owner_completed_at: datetime | None
    completed_at: datetime | None
    requester_rating: int | None
    owner_rating: int | None
    requester_feedback: str | None
    owner_feedback: str | None
    cancelled_by: UUID | None


@dataclass(frozen=True)
class BookInfo:
    """The slice of a catalog book the negotiation engine needs."""
    id: BookId
    owner_id: UserId
    is_available: bool


class BookDirectory(Protocol):
    """Contract for catalog + user lookups — implemented by shell."""
    async def get_book(self, book_id: BookId) -> BookInfo | None: ...
    async def user_exists(self, user_id: UserId) -> bool: ...
    async def reserve(self, book_ids: list[BookId]) -> bool: ...
    async def release(self, book_ids: list[BookId]) -> None: ...
    async def transfer_ownership(
        self, book_id: BookId, new_owner_id: UserId,
    ) -> None: ...


class SwapEventSink(Protocol):
    """Contract for notification dispatch — fire-and-forget."""
    async def dispatch(self, event: SwapEvent) -> None: ...


class Clock(Protocol):
    """Injectable time source (aware UTC)."""
    def now(self) -> datetime: ...
