"""Test doubles for the swap services — pinned clock, event sinks, fresh reads."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.swap_events import SwapEvent
from app.models.book import Book
from app.models.swap_request import SwapRequest


class FixedClock:
    """Deterministic Clock: returns the same instant until advanced."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class RecordingSink:
    """SwapEventSink that keeps every dispatched event."""

    def __init__(self):
        self.events: list[SwapEvent] = []

    async def dispatch(self, event: SwapEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [e.type.value for e in self.events]


class FailingSink:
    async def dispatch(self, event: SwapEvent) -> None:
        raise RuntimeError("notification backend down")


@dataclass
class Cast:
    """Seeded users and books for one test."""
    requester: UUID
    owner: UUID
    stranger: UUID
    wanted_book: UUID       # owned by owner
    offered_book: UUID      # owned by requester
    counter_book: UUID      # owned by owner
    spare_book: UUID        # owned by requester


async def fetch_book(db: AsyncSession, book_id: UUID) -> Book:
    """Fresh read — Core UPDATEs bypass the identity map."""
    result = await db.execute(
        select(Book).where(Book.id == book_id)
        .execution_options(populate_existing=True),
    )
    return result.scalar_one()


async def fetch_swap(db: AsyncSession, swap_id: UUID) -> SwapRequest:
    result = await db.execute(
        select(SwapRequest).where(SwapRequest.id == swap_id)
        .execution_options(populate_existing=True),
    )
    return result.scalar_one()
