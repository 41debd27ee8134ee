"""Swap Actions — one POST endpoint per lifecycle action.

Invariants:
    - Routes never contain business logic: each delegates to one service operation
    - Every action runs through run_with_conflict_retry
    - Response is the updated swap as seen by the actor
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.dependencies import (
    get_completion_tracker, get_current_user_id, get_lifecycle,
)
from app.config import get_settings
from app.schemas.swap import (
    CounterOfferCreate, SwapCompletionInput, SwapRequestResponse,
)
from app.services.conflict_retry import run_with_conflict_retry
from app.services.swap_completion import CompletionTracker
from app.services.swap_lifecycle import SwapLifecycle
from app.services.swap_queries import present_swap

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/swaps/{swap_id}", tags=["swap-actions"])


async def _with_retry(operation):
    return await run_with_conflict_retry(
        operation, retries=get_settings().conflict_retry_attempts,
    )


@router.post("/accept", response_model=SwapRequestResponse)
async def accept_swap_request(
    swap_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    lifecycle: SwapLifecycle = Depends(get_lifecycle),
):
    swap = await _with_retry(
        lambda: lifecycle.accept_swap_request(swap_id, user_id),
    )
    return present_swap(swap, user_id)


@router.post("/counter-offer", response_model=SwapRequestResponse)
async def propose_counter_offer(
    swap_id: UUID,
    body: CounterOfferCreate,
    user_id: UUID = Depends(get_current_user_id),
    lifecycle: SwapLifecycle = Depends(get_lifecycle),
):
    swap = await _with_retry(
        lambda: lifecycle.propose_counter_offer(
            swap_id, user_id,
            body.counter_offered_book_id, body.counter_offer_message,
        ),
    )
    return present_swap(swap, user_id)


@router.post("/accept-counter-offer", response_model=SwapRequestResponse)
async def accept_counter_offer(
    swap_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    lifecycle: SwapLifecycle = Depends(get_lifecycle),
):
    swap = await _with_retry(
        lambda: lifecycle.accept_counter_offer(swap_id, user_id),
    )
    return present_swap(swap, user_id)


@router.post("/cancel", response_model=SwapRequestResponse)
async def cancel_swap(
    swap_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    lifecycle: SwapLifecycle = Depends(get_lifecycle),
):
    swap = await _with_retry(lambda: lifecycle.cancel_swap(swap_id, user_id))
    return present_swap(swap, user_id)


@router.post("/complete", response_model=SwapRequestResponse)
async def complete_swap(
    swap_id: UUID,
    body: SwapCompletionInput,
    user_id: UUID = Depends(get_current_user_id),
    tracker: CompletionTracker = Depends(get_completion_tracker),
):
    """Confirm the exchange happened and rate the other party."""
    swap = await _with_retry(
        lambda: tracker.complete_swap(
            swap_id, user_id, body.rating, body.feedback,
        ),
    )
    return present_swap(swap, user_id)
