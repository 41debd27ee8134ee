"""Completion Tracker — dual confirmation that the physical exchange happened.

Invariants:
    - Rating validated BEFORE the store is read (ValidationError, no IO)
    - Precedence after reading: NotFound → NotAccepted → Forbidden → AlreadyCompleted
    - The write asserts status = ACCEPTED AND the actor's own completed_at IS NULL,
      so the two parties' confirmations never conflict with each other
    - The second confirmation promotes to COMPLETED in the same UPDATE
    - SWAP_COMPLETED emitted only when the swap actually reaches COMPLETED;
      a partial confirmation emits nothing

Design Decisions:
    - Book ownership swap runs in the same transaction as the promoting write,
      keyed off the committed row rather than the pre-read snapshot
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.completion import check_completion, check_feedback, check_rating
from app.core.domain_types import NotificationType, SwapId, SwapStatus, UserId
from app.core.errors import (
    ConcurrencyError, ErrorContext, ResourceNotFoundError, error_from_violation,
)
from app.core.repository_protocols import BookDirectory, Clock, SwapEventSink
from app.core.swap_events import SwapEvent
from app.core.swap_state import exchanged_books, swap_state_from_record
from app.models.swap_request import SwapRequest
from app.services.swap_lifecycle import REFRESH_MESSAGE
from app.services.swap_store import SwapRequestStore

logger = logging.getLogger(__name__)


class CompletionTracker:
    """Records per-party completion and finalizes the swap."""

    def __init__(
        self,
        db: AsyncSession,
        books: BookDirectory,
        events: SwapEventSink,
        clock: Clock,
        store: SwapRequestStore | None = None,
    ):
        self.db = db
        self.books = books
        self.events = events
        self.clock = clock
        self.store = store or SwapRequestStore(db)

    async def complete_swap(
        self,
        swap_id: SwapId,
        actor_id: UserId,
        rating: int,
        feedback: str | None = None,
    ) -> SwapRequest:
        context = ErrorContext(swap_id=swap_id, actor_id=actor_id)
        violation = check_rating(rating) or check_feedback(feedback)
        if violation:
            raise error_from_violation(violation, context)

        row = await self.store.get(swap_id)
        if row is None:
            raise ResourceNotFoundError("Swap request", str(swap_id), context)
        state = swap_state_from_record(row)
        violation = check_completion(state, actor_id)
        if violation:
            raise error_from_violation(violation, context)

        role = state.parties.role_of(actor_id)
        applied = await self.store.record_completion(
            swap_id, role, self.clock.now(), rating, feedback,
        )
        if not applied:
            await self.db.rollback()
            logger.warning(
                "Completion write matched no rows",
                extra={"swap_id": swap_id, "actor_id": actor_id, "action": "complete"},
            )
            context.user_message = REFRESH_MESSAGE
            raise ConcurrencyError(
                f"Swap {swap_id} changed during complete", context,
            )

        updated = await self.store.get(swap_id)
        finished = updated.status == SwapStatus.COMPLETED.value
        if finished:
            await self._exchange_books(swap_state_from_record(updated))
        await self.db.commit()
        logger.info(
            "Swap completion recorded",
            extra={
                "swap_id": swap_id, "actor_id": actor_id, "action": "complete",
            },
        )
        if finished:
            await self._emit(swap_id, actor_id)
        return updated

    async def _exchange_books(self, state) -> None:
        books = exchanged_books(state)
        await self.books.transfer_ownership(
            books["requester_gets"], state.parties.requester_id,
        )
        await self.books.transfer_ownership(
            books["owner_gets"], state.parties.owner_id,
        )
        await self.books.release(list(books.values()))

    async def _emit(self, swap_id: SwapId, actor_id: UserId) -> None:
        event = SwapEvent(
            type=NotificationType.SWAP_COMPLETED, swap_id=swap_id,
            actor_id=actor_id, occurred_at=self.clock.now(),
        )
        try:
            await self.events.dispatch(event)
        except Exception:
            logger.warning(
                "Failed to dispatch swap event",
                extra={
                    "swap_id": swap_id,
                    "actor_id": actor_id,
                    "notification_type": event.type.value,
                },
                exc_info=True,
            )
