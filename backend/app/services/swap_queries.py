"""Swap Queries — read-side views: detail, inbox/outbox, counts, statistics.

Invariants:
    - Read-only: nothing here writes or commits
    - Detail is visible to the two parties only (Forbidden otherwise)
    - available_actions comes from PermissionGate, so the UI never offers an action
      the server would refuse
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.completion import (
    completion_message, pending_completion_user, progress_of,
)
from app.core.enforce_swap import available_actions
from app.core.errors import ErrorContext, ForbiddenError, ResourceNotFoundError
from app.core.swap_state import exchanged_books, swap_state_from_record
from app.core.swap_stats import compute_swap_statistics, compute_user_rating
from app.models.swap_request import SwapRequest
from app.services.swap_store import SwapRequestStore


def present_swap(row: SwapRequest, viewer_id: UUID) -> dict:
    """Row columns plus the viewer-relative derived fields."""
    state = swap_state_from_record(row)
    books = exchanged_books(state)
    return {
        "id": row.id,
        "requester_id": row.requester_id,
        "owner_id": row.owner_id,
        "book_id": row.book_id,
        "offered_book_id": row.offered_book_id,
        "counter_offered_book_id": row.counter_offered_book_id,
        "status": row.status,
        "message": row.message,
        "counter_offer_message": row.counter_offer_message,
        "requester_completed_at": row.requester_completed_at,
        "owner_completed_at": row.owner_completed_at,
        "completed_at": row.completed_at,
        "requester_rating": row.requester_rating,
        "owner_rating": row.owner_rating,
        "requester_feedback": row.requester_feedback,
        "owner_feedback": row.owner_feedback,
        "cancelled_by": row.cancelled_by,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
        "completion_progress": progress_of(state),
        "completion_message": completion_message(state, viewer_id),
        "pending_completion_user": pending_completion_user(state),
        "available_actions": available_actions(state, viewer_id),
        "requester_gets_book_id": books["requester_gets"],
        "owner_gets_book_id": books["owner_gets"],
    }


class SwapQueries:
    """Viewer-scoped reads over swap requests."""

    def __init__(self, db: AsyncSession, store: SwapRequestStore | None = None):
        self.store = store or SwapRequestStore(db)

    async def get_for_viewer(self, swap_id: UUID, viewer_id: UUID) -> dict:
        context = ErrorContext(swap_id=swap_id, actor_id=viewer_id)
        row = await self.store.get(swap_id)
        if row is None:
            raise ResourceNotFoundError("Swap request", str(swap_id), context)
        if viewer_id not in (row.requester_id, row.owner_id):
            raise ForbiddenError(
                "Only swap participants can view this request.", context,
            )
        return present_swap(row, viewer_id)

    async def list_for_viewer(self, viewer_id: UUID) -> dict:
        incoming, outgoing = await self.store.list_for_user(viewer_id)
        return {
            "incoming": [present_swap(r, viewer_id) for r in incoming],
            "outgoing": [present_swap(r, viewer_id) for r in outgoing],
        }

    async def pending_counts(self, viewer_id: UUID) -> dict:
        return await self.store.count_open(viewer_id)

    async def statistics(self, user_id: UUID) -> dict:
        swaps = await self.store.list_involving(user_id)
        return compute_swap_statistics(swaps, user_id)

    async def rating(self, user_id: UUID) -> dict:
        swaps = await self.store.list_involving(user_id)
        return compute_user_rating(swaps, user_id)
