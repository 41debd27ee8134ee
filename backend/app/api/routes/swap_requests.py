"""Swap Requests — create, list, count, view and status-update swap requests.

Invariants:
    - Every route is scoped to the X-User-Id actor
    - /swaps/counts is declared before /swaps/{swap_id} so it is not parsed as an id
    - Mutations run through run_with_conflict_retry

Design Decisions:
    - PUT /swaps/{id} kept for clients that drive the lifecycle by target status;
      SwapLifecycle.change_status routes it to the dedicated operation
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.dependencies import (
    get_current_user_id, get_lifecycle, get_swap_queries,
)
from app.config import get_settings
from app.schemas.swap import (
    SwapCountsResponse, SwapListResponse, SwapRequestCreate,
    SwapRequestResponse, SwapStatusUpdate,
)
from app.services.conflict_retry import run_with_conflict_retry
from app.services.swap_lifecycle import SwapLifecycle
from app.services.swap_queries import SwapQueries, present_swap

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/swaps", tags=["swaps"])


@router.post(
    "", response_model=SwapRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_swap_request(
    body: SwapRequestCreate,
    user_id: UUID = Depends(get_current_user_id),
    lifecycle: SwapLifecycle = Depends(get_lifecycle),
):
    """Request another user's book, offering one of your own."""
    swap = await run_with_conflict_retry(
        lambda: lifecycle.create_swap_request(
            user_id, body.book_id, body.offered_book_id, body.message,
        ),
        retries=get_settings().conflict_retry_attempts,
    )
    return present_swap(swap, user_id)


@router.get("", response_model=SwapListResponse)
async def list_swap_requests(
    user_id: UUID = Depends(get_current_user_id),
    queries: SwapQueries = Depends(get_swap_queries),
):
    """Incoming (you own the book) and outgoing (you asked) requests."""
    return await queries.list_for_viewer(user_id)


@router.get("/counts", response_model=SwapCountsResponse)
async def count_pending_swap_requests(
    user_id: UUID = Depends(get_current_user_id),
    queries: SwapQueries = Depends(get_swap_queries),
):
    return await queries.pending_counts(user_id)


@router.get("/{swap_id}", response_model=SwapRequestResponse)
async def get_swap_request(
    swap_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    queries: SwapQueries = Depends(get_swap_queries),
):
    return await queries.get_for_viewer(swap_id, user_id)


@router.put("/{swap_id}", response_model=SwapRequestResponse)
async def update_swap_status(
    swap_id: UUID,
    body: SwapStatusUpdate,
    user_id: UUID = Depends(get_current_user_id),
    lifecycle: SwapLifecycle = Depends(get_lifecycle),
):
    swap = await run_with_conflict_retry(
        lambda: lifecycle.change_status(swap_id, user_id, body.status),
        retries=get_settings().conflict_retry_attempts,
    )
    return present_swap(swap, user_id)


@router.delete("/{swap_id}", response_model=SwapRequestResponse)
async def delete_swap_request(
    swap_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    lifecycle: SwapLifecycle = Depends(get_lifecycle),
):
    """Cancel — swaps are never hard-deleted (audit trail)."""
    swap = await run_with_conflict_retry(
        lambda: lifecycle.cancel_swap(swap_id, user_id),
        retries=get_settings().conflict_retry_attempts,
    )
    return present_swap(swap, user_id)
