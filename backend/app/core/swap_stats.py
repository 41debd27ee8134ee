"""Swap Stats — pure per-user statistics recomputed from the full swap set.

Invariants:
    - All inputs come from SwapRecord rows (no IO, no DB)
    - Recomputed on every read, never incrementally maintained
    - average_rating counts ratings RECEIVED by the user (the counterpart's rating)
      on COMPLETED swaps only
    - Never raises on empty input — all numbers default to 0

Design Decisions:
    - Pure function over a denormalized counter column: correctness over update cost
    - completion_rate is a percentage; both statistics rounded to one decimal for display.
      compute_user_rating returns the exact mean (clients format it)
"""

from uuid import UUID

from app.core.domain_types import SwapStatus, MIN_RATING, MAX_RATING
from app.core.repository_protocols import SwapRecord


def _ratings_received(swaps: list[SwapRecord], user_id: UUID) -> list[int]:
    ratings = []
    for swap in swaps:
        if swap.status != SwapStatus.COMPLETED:
            continue
        if swap.requester_id == user_id and swap.owner_rating is not None:
            ratings.append(swap.owner_rating)
        elif swap.owner_id == user_id and swap.requester_rating is not None:
            ratings.append(swap.requester_rating)
    return ratings


def compute_swap_statistics(swaps: list[SwapRecord], user_id: UUID) -> dict:
    """Totals, completion rate and average received rating. Pure, no IO."""
    mine = [
        s for s in swaps if user_id in (s.requester_id, s.owner_id)
    ]
    total = len(mine)
    completed = sum(1 for s in mine if s.status == SwapStatus.COMPLETED)
    ratings = _ratings_received(mine, user_id)
    average = sum(ratings) / len(ratings) if ratings else 0
    rate = (completed / total) * 100 if total else 0

    return {
        "total_swaps": total,
        "total_completed": completed,
        "completion_rate": round(rate, 1),
        "average_rating": round(average, 1),
    }


def compute_user_rating(swaps: list[SwapRecord], user_id: UUID) -> dict:
    """Received-rating average plus a 1–5 histogram."""
    ratings = _ratings_received(swaps, user_id)
    breakdown = {star: 0 for star in range(MIN_RATING, MAX_RATING + 1)}
    for rating in ratings:
        breakdown[rating] += 1
    return {
        "average_rating": sum(ratings) / len(ratings) if ratings else 0,
        "total_ratings": len(ratings),
        "ratings_breakdown": breakdown,
    }
