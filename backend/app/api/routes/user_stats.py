"""User Stats — per-user swap statistics and received-rating breakdown.

Invariants:
    - Recomputed from swap rows on every request (no cached counters)
    - Public within the API: any authenticated user may read another user's stats
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_user_id, get_swap_queries
from app.schemas.swap import SwapStatisticsResponse, UserRatingResponse
from app.services.swap_queries import SwapQueries

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/{user_id}/swap-statistics", response_model=SwapStatisticsResponse)
async def get_swap_statistics(
    user_id: UUID,
    _viewer_id: UUID = Depends(get_current_user_id),
    queries: SwapQueries = Depends(get_swap_queries),
):
    return await queries.statistics(user_id)


@router.get("/{user_id}/rating", response_model=UserRatingResponse)
async def get_user_rating(
    user_id: UUID,
    _viewer_id: UUID = Depends(get_current_user_id),
    queries: SwapQueries = Depends(get_swap_queries),
):
    return await queries.rating(user_id)
