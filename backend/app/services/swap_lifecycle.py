"""Swap Lifecycle — create, accept, counter-offer, accept-counter-offer, cancel.

Invariants:
    - Every operation re-reads the row, checks it against PermissionGate, then issues
      ONE conditional write asserting the status it read (CAS)
    - Zero rows affected → ConcurrencyError (never confused with a failed precondition)
    - Read-time precedence: NotFound → non-party Forbidden → InvalidTransition → role Forbidden
    - Book availability changes commit in the same transaction as the status change
    - Exactly one SwapEvent per committed transition, emitted AFTER commit

Design Decisions:
    - Impureim sandwich: load (IO) → check_* (pure core) → CAS write (IO) → emit (IO)
    - The service owns the commit; the request session is passed in (ADR: one
      transaction per operation, retry wrapper re-runs the whole sandwich)
    - Event emission failures are logged and swallowed: a committed swap is never
      reported as failed because a notification could not be queued
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import (
    BookId, NotificationType, SwapAction, SwapId, SwapStatus, UserId,
)
from app.core.enforce_swap import (
    check_action, check_counter_book, check_message, check_swap_request,
)
from app.core.errors import (
    ConcurrencyError, ErrorContext, ForbiddenError, ResourceNotFoundError,
    ValidationError,
    error_from_violation,
)
from app.core.repository_protocols import BookDirectory, Clock, SwapEventSink
from app.core.swap_events import SwapEvent
from app.core.swap_state import SwapState, reserved_books, swap_state_from_record
from app.core.swap_transitions import check_status_change
from app.models.swap_request import SwapRequest
from app.services.swap_store import SwapRequestStore

logger = logging.getLogger(__name__)

REFRESH_MESSAGE = "This request was just updated, please refresh."


class SwapLifecycle:
    """Status transitions for a single swap request."""

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

    # ─── Operations ──────────────────────────────────────────────

    async def create_swap_request(
        self,
        requester_id: UserId,
        book_id: BookId,
        offered_book_id: BookId,
        message: str | None = None,
    ) -> SwapRequest:
        """Open a PENDING swap and reserve both books."""
        context = ErrorContext(actor_id=requester_id)
        violation = check_message(message)
        if violation:
            raise error_from_violation(violation, context)
        if not await self.books.user_exists(requester_id):
            raise ResourceNotFoundError("User", str(requester_id), context)
        book = await self.books.get_book(book_id)
        if book is None:
            raise ResourceNotFoundError("Book", str(book_id), context)
        offered_book = await self.books.get_book(offered_book_id)
        if offered_book is None:
            raise ResourceNotFoundError("Book", str(offered_book_id), context)
        violation = check_swap_request(requester_id, book, offered_book)
        if violation:
            raise error_from_violation(violation, context)

        if not await self.books.reserve([book_id, offered_book_id]):
            await self._lost_race(None, requester_id, "create", context)
        now = self.clock.now()
        swap = await self.store.add(SwapRequest(
            requester_id=requester_id,
            owner_id=book.owner_id,
            book_id=book_id,
            offered_book_id=offered_book_id,
            status=SwapStatus.PENDING.value,
            message=message,
            created_at=now,
            updated_at=now,
        ))
        await self.db.commit()
        logger.info(
            "Swap request created",
            extra={"swap_id": swap.id, "actor_id": requester_id},
        )
        await self._emit(NotificationType.SWAP_REQUEST, swap.id, requester_id)
        return await self._reload(swap.id, requester_id)

    async def accept_swap_request(
        self, swap_id: SwapId, actor_id: UserId,
    ) -> SwapRequest:
        """PENDING → ACCEPTED, by the owner."""
        state, context = await self._load_checked(
            swap_id, actor_id, SwapAction.ACCEPT,
        )
        await self._compare_and_set(
            state, actor_id, SwapAction.ACCEPT, SwapStatus.ACCEPTED, {}, context,
        )
        await self.db.commit()
        self._log_transition(swap_id, actor_id, SwapAction.ACCEPT)
        await self._emit(NotificationType.SWAP_ACCEPTED, swap_id, actor_id)
        return await self._reload(swap_id, actor_id)

    async def propose_counter_offer(
        self,
        swap_id: SwapId,
        actor_id: UserId,
        counter_book_id: BookId,
        message: str | None = None,
    ) -> SwapRequest:
        """PENDING → COUNTER_OFFER, by the owner, proposing one of their own books."""
        violation = check_message(message, "counter_offer_message")
        if violation:
            raise error_from_violation(
                violation, ErrorContext(swap_id=swap_id, actor_id=actor_id),
            )
        state, context = await self._load_checked(
            swap_id, actor_id, SwapAction.COUNTER_OFFER,
        )
        counter_book = await self.books.get_book(counter_book_id)
        if counter_book is None:
            raise ResourceNotFoundError("Book", str(counter_book_id), context)
        violation = check_counter_book(state.parties.owner_id, counter_book)
        if violation:
            raise error_from_violation(violation, context)

        await self._compare_and_set(
            state, actor_id, SwapAction.COUNTER_OFFER, SwapStatus.COUNTER_OFFER,
            {
                "counter_offered_book_id": counter_book_id,
                "counter_offer_message": message,
            },
            context,
        )
        # The originally requested book goes back on the shelf
        await self.books.release([state.parties.book_id])
        if not await self.books.reserve([counter_book_id]):
            await self._lost_race(
                swap_id, actor_id, SwapAction.COUNTER_OFFER.value, context,
            )
        await self.db.commit()
        self._log_transition(swap_id, actor_id, SwapAction.COUNTER_OFFER)
        await self._emit(NotificationType.SWAP_COUNTER_OFFER, swap_id, actor_id)
        return await self._reload(swap_id, actor_id)

    async def accept_counter_offer(
        self, swap_id: SwapId, actor_id: UserId,
    ) -> SwapRequest:
        """COUNTER_OFFER → ACCEPTED, by the requester."""
        state, context = await self._load_checked(
            swap_id, actor_id, SwapAction.ACCEPT_COUNTER_OFFER,
        )
        await self._compare_and_set(
            state, actor_id, SwapAction.ACCEPT_COUNTER_OFFER,
            SwapStatus.ACCEPTED, {}, context,
        )
        await self.db.commit()
        self._log_transition(swap_id, actor_id, SwapAction.ACCEPT_COUNTER_OFFER)
        await self._emit(NotificationType.SWAP_ACCEPTED, swap_id, actor_id)
        return await self._reload(swap_id, actor_id)

    async def cancel_swap(self, swap_id: SwapId, actor_id: UserId) -> SwapRequest:
        """Any non-terminal status → CANCELLED, by either party."""
        state, context = await self._load_checked(
            swap_id, actor_id, SwapAction.CANCEL,
        )
        await self._compare_and_set(
            state, actor_id, SwapAction.CANCEL, SwapStatus.CANCELLED,
            {"cancelled_by": actor_id}, context,
        )
        await self.books.release(reserved_books(state))
        await self.db.commit()
        self._log_transition(swap_id, actor_id, SwapAction.CANCEL)
        await self._emit(NotificationType.SWAP_CANCELLED, swap_id, actor_id)
        return await self._reload(swap_id, actor_id)

    async def change_status(
        self, swap_id: SwapId, actor_id: UserId, target: SwapStatus,
    ) -> SwapRequest:
        """Generic status update — routed to the dedicated operation for target.

        Same precedence as the dedicated operations: NotFound, non-party
        Forbidden, then InvalidTransition for moves outside the table. Moves
        inside the table that need extra input (counter book, rating) are a
        ValidationError pointing at their own endpoint.
        """
        context = ErrorContext(swap_id=swap_id, actor_id=actor_id)
        state = await self._load(swap_id, context)
        if not state.parties.is_party(actor_id):
            raise ForbiddenError(
                "Only swap participants can act on this request.", context,
            )
        violation = check_status_change(state.status, target)
        if violation:
            raise error_from_violation(violation, context)
        if target in (SwapStatus.COUNTER_OFFER, SwapStatus.COMPLETED):
            raise ValidationError(
                f"Use the dedicated endpoint to move a swap to {target.value}.",
                "status", context,
            )
        if target == SwapStatus.CANCELLED:
            return await self.cancel_swap(swap_id, actor_id)
        if state.status == SwapStatus.COUNTER_OFFER:
            return await self.accept_counter_offer(swap_id, actor_id)
        return await self.accept_swap_request(swap_id, actor_id)

    # ─── Helpers ─────────────────────────────────────────────────

    async def _load(self, swap_id: SwapId, context: ErrorContext) -> SwapState:
        row = await self.store.get(swap_id)
        if row is None:
            raise ResourceNotFoundError("Swap request", str(swap_id), context)
        return swap_state_from_record(row)

    async def _load_checked(
        self, swap_id: SwapId, actor_id: UserId, action: SwapAction,
    ) -> tuple[SwapState, ErrorContext]:
        context = ErrorContext(swap_id=swap_id, actor_id=actor_id)
        state = await self._load(swap_id, context)
        violation = check_action(state, actor_id, action)
        if violation:
            raise error_from_violation(violation, context)
        return state, context

    async def _compare_and_set(
        self,
        state: SwapState,
        actor_id: UserId,
        action: SwapAction,
        target: SwapStatus,
        values: dict,
        context: ErrorContext,
    ) -> None:
        applied = await self.store.compare_and_set(
            state.parties.swap_id,
            state.status,
            {**values, "status": target.value},
            self.clock.now(),
        )
        if not applied:
            await self._lost_race(
                state.parties.swap_id, actor_id, action.value, context,
            )

    async def _lost_race(
        self,
        swap_id: SwapId | None,
        actor_id: UserId,
        operation: str,
        context: ErrorContext,
    ) -> None:
        await self.db.rollback()
        logger.warning(
            "Conditional write matched no rows",
            extra={
                "swap_id": swap_id, "actor_id": actor_id, "action": operation,
            },
        )
        context.user_message = REFRESH_MESSAGE
        raise ConcurrencyError(
            f"Swap {swap_id} changed during {operation}", context,
        )

    async def _reload(self, swap_id: SwapId, actor_id: UserId) -> SwapRequest:
        row = await self.store.get(swap_id)
        if row is None:
            raise ResourceNotFoundError(
                "Swap request", str(swap_id),
                ErrorContext(swap_id=swap_id, actor_id=actor_id),
            )
        return row

    async def _emit(
        self, event_type: NotificationType, swap_id: UUID, actor_id: UUID,
    ) -> None:
        event = SwapEvent(
            type=event_type, swap_id=swap_id, actor_id=actor_id,
            occurred_at=self.clock.now(),
        )
        try:
            await self.events.dispatch(event)
        except Exception:
            logger.warning(
                "Failed to dispatch swap event",
                extra={
                    "swap_id": swap_id,
                    "actor_id": actor_id,
                    "notification_type": event_type.value,
                },
                exc_info=True,
            )

    def _log_transition(
        self, swap_id: SwapId, actor_id: UserId, action: SwapAction,
    ) -> None:
        logger.info(
            f"Swap {action.value} committed",
            extra={"swap_id": swap_id, "actor_id": actor_id, "action": action.value},
        )
