"""Swap Events — side-effect events and the pure notification policy around them.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - One event per committed transition; partial completion is not a transition
    - The actor is never notified of their own action, except SWAP_COMPLETED (both parties)
    - Dedup key is (recipient, swap_id, type) within a rolling window

Design Decisions:
    - Recipients derived from (type, requester, owner, actor), not stored on the event:
      the dispatcher re-reads parties, so events stay tiny
    - Titles/messages live here, not in the dispatcher: text is policy, delivery is IO
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID

from app.core.domain_types import NotificationType, SwapId, UserId

DEFAULT_DEDUP_WINDOW_DAYS = 4


@dataclass(frozen=True)
class SwapEvent:
    """Emitted after a committed transition."""
    type: NotificationType
    swap_id: SwapId
    actor_id: UserId
    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


_TITLES = {
    NotificationType.SWAP_REQUEST: "New Swap Request",
    NotificationType.SWAP_ACCEPTED: "Swap Request Accepted",
    NotificationType.SWAP_COUNTER_OFFER: "Counter-Offer Received",
    NotificationType.SWAP_CANCELLED: "Swap Cancelled",
    NotificationType.SWAP_COMPLETED: "Swap Completed",
}

_MESSAGES = {
    NotificationType.SWAP_REQUEST: "Someone wants to swap for one of your books.",
    NotificationType.SWAP_ACCEPTED: "Your swap was accepted. Arrange the exchange!",
    NotificationType.SWAP_COUNTER_OFFER: (
        "The owner proposed a different book. Review the counter-offer."
    ),
    NotificationType.SWAP_CANCELLED: "A swap you were part of was cancelled.",
    NotificationType.SWAP_COMPLETED: (
        "Both parties confirmed the exchange. Enjoy your new book!"
    ),
}


def notification_recipients(
    event_type: NotificationType,
    requester_id: UUID,
    owner_id: UUID,
    actor_id: UUID,
) -> list[UUID]:
    """Who receives a notification for this event."""
    if event_type == NotificationType.SWAP_REQUEST:
        return [owner_id]
    if event_type == NotificationType.SWAP_COUNTER_OFFER:
        return [requester_id]
    if event_type in (
        NotificationType.SWAP_ACCEPTED, NotificationType.SWAP_CANCELLED,
    ):
        # Whoever did not act: an accepted counter-offer notifies the owner
        return [owner_id] if actor_id == requester_id else [requester_id]
    if event_type == NotificationType.SWAP_COMPLETED:
        return [requester_id, owner_id]
    return []


def format_notification(event_type: NotificationType) -> tuple[str, str]:
    """(title, message) shown to the recipient."""
    return _TITLES[event_type], _MESSAGES[event_type]


def dedup_cutoff(now: datetime, window_days: int = DEFAULT_DEDUP_WINDOW_DAYS) -> datetime:
    """Earliest created_at that still counts as a repeat send."""
    return now - timedelta(days=window_days)
