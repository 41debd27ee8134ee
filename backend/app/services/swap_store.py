"""Swap Store — persistence adapter for SwapRequest with compare-and-set writes.

Invariants:
    - Every read uses populate_existing: a retry never sees a stale identity-map row
    - Every write is a single conditional UPDATE guarded by the expected status
    - compare_and_set / record_completion return False on zero rows, never raise
    - updated_at is set on every write

Design Decisions:
    - Core UPDATE statements (not ORM attribute mutation): the WHERE clause is the
      optimistic lock, and rowcount is the only reliable signal of who won
    - Completion promotion computed in SQL with CASE on the other party's column:
      a concurrent confirmation is re-evaluated against the committed row
      (ADR: no lost update between the two confirmations)
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import case, func, or_, select, type_coerce, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.completion import (
    COMPLETION_COLUMNS, completion_columns, other_completion_column,
)
from app.core.domain_types import PartyRole, SwapStatus
from app.models.swap_request import SwapRequest

_OPEN_STATUSES = (SwapStatus.PENDING.value, SwapStatus.COUNTER_OFFER.value)


class SwapRequestStore:
    """Reads and conditional writes for the swap_requests table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, swap_id: UUID) -> SwapRequest | None:
        result = await self.db.execute(
            select(SwapRequest)
            .where(SwapRequest.id == swap_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def add(self, swap: SwapRequest) -> SwapRequest:
        self.db.add(swap)
        await self.db.flush()
        return swap

    async def compare_and_set(
        self,
        swap_id: UUID,
        expected_status: SwapStatus,
        values: dict,
        now: datetime,
    ) -> bool:
        """UPDATE … WHERE id = :id AND status = :expected. True iff one row changed."""
        result = await self.db.execute(
            update(SwapRequest)
            .where(
                SwapRequest.id == swap_id,
                SwapRequest.status == expected_status.value,
            )
            .values(**values, updated_at=now)
            .execution_options(synchronize_session=False),
        )
        return result.rowcount == 1

    async def record_completion(
        self,
        swap_id: UUID,
        role: PartyRole,
        now: datetime,
        rating: int,
        feedback: str | None,
    ) -> bool:
        """Land one party's confirmation; promote to COMPLETED in the same statement."""
        own_column = getattr(SwapRequest, COMPLETION_COLUMNS[role][0])
        other_column = getattr(SwapRequest, other_completion_column(role))
        other_done = other_column.is_not(None)
        stamp = type_coerce(now, SwapRequest.completed_at.type)
        result = await self.db.execute(
            update(SwapRequest)
            .where(
                SwapRequest.id == swap_id,
                SwapRequest.status == SwapStatus.ACCEPTED.value,
                own_column.is_(None),
            )
            .values(
                **completion_columns(role, now, rating, feedback),
                completed_at=case(
                    (other_done, stamp), else_=SwapRequest.completed_at,
                ),
                status=case(
                    (other_done, SwapStatus.COMPLETED.value),
                    else_=SwapRequest.status,
                ),
                updated_at=now,
            )
            .execution_options(synchronize_session=False),
        )
        return result.rowcount == 1

    async def list_for_user(
        self, user_id: UUID,
    ) -> tuple[list[SwapRequest], list[SwapRequest]]:
        """(incoming, outgoing) — newest first."""
        incoming = await self.db.execute(
            select(SwapRequest)
            .where(SwapRequest.owner_id == user_id)
            .order_by(SwapRequest.created_at.desc()),
        )
        outgoing = await self.db.execute(
            select(SwapRequest)
            .where(SwapRequest.requester_id == user_id)
            .order_by(SwapRequest.created_at.desc()),
        )
        return list(incoming.scalars().all()), list(outgoing.scalars().all())

    async def list_involving(self, user_id: UUID) -> list[SwapRequest]:
        result = await self.db.execute(
            select(SwapRequest).where(
                or_(
                    SwapRequest.requester_id == user_id,
                    SwapRequest.owner_id == user_id,
                ),
            ),
        )
        return list(result.scalars().all())

    async def count_open(self, user_id: UUID) -> dict:
        """Open (PENDING or COUNTER_OFFER) swaps on each side of the user."""
        incoming = await self.db.execute(
            select(func.count(SwapRequest.id)).where(
                SwapRequest.owner_id == user_id,
                SwapRequest.status.in_(_OPEN_STATUSES),
            ),
        )
        outgoing = await self.db.execute(
            select(func.count(SwapRequest.id)).where(
                SwapRequest.requester_id == user_id,
                SwapRequest.status.in_(_OPEN_STATUSES),
            ),
        )
        return {
            "incoming_pending": incoming.scalar_one(),
            "outgoing_pending": outgoing.scalar_one(),
        }
