"""Notification Dispatcher — best-effort delivery of swap events as in-app notifications.

Invariants:
    - deliver() uses its own DB session — never the request's transaction
    - A (recipient, swap, type) already notified inside the dedup window is skipped
    - deliver_safely() never raises: failures are logged and swallowed here, at the edge
    - Nothing here can roll back or alter a committed swap transition

Design Decisions:
    - Dedup is a window query, not a unique constraint: a repeat after the window
      (e.g. a second SWAP_REQUEST on a re-listed book) must still go through
    - BackgroundNotifier adapts FastAPI BackgroundTasks to the SwapEventSink protocol:
      the response is sent before delivery starts (fire-and-forget)
"""

import logging
from datetime import datetime

from fastapi import BackgroundTasks
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.repository_protocols import Clock
from app.core.swap_events import (
    DEFAULT_DEDUP_WINDOW_DAYS, SwapEvent, dedup_cutoff,
    format_notification, notification_recipients,
)
from app.infrastructure.clock import SystemClock
from app.infrastructure.database import DatabaseSessionManager
from app.models.notification import Notification
from app.models.swap_request import SwapRequest

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Persists one Notification per recipient, deduplicated within a window."""

    def __init__(
        self,
        manager: DatabaseSessionManager,
        clock: Clock | None = None,
        dedup_window_days: int = DEFAULT_DEDUP_WINDOW_DAYS,
    ):
        self._manager = manager
        self._clock = clock or SystemClock()
        self._window_days = dedup_window_days

    async def deliver(self, event: SwapEvent) -> int:
        """Write notifications for event. Returns how many were created."""
        async with self._manager.session() as db:
            swap = await db.get(SwapRequest, event.swap_id)
            if swap is None:
                logger.warning(
                    "Swap vanished before notification delivery",
                    extra={"swap_id": event.swap_id},
                )
                return 0
            now = self._clock.now()
            title, message = format_notification(event.type)
            created = 0
            for recipient_id in notification_recipients(
                event.type, swap.requester_id, swap.owner_id, event.actor_id,
            ):
                if await self._recently_sent(db, recipient_id, event, now):
                    logger.info(
                        "Skipping duplicate notification",
                        extra={
                            "swap_id": event.swap_id,
                            "recipient_id": recipient_id,
                            "notification_type": event.type.value,
                        },
                    )
                    continue
                db.add(Notification(
                    user_id=recipient_id,
                    swap_request_id=event.swap_id,
                    actor_id=event.actor_id,
                    type=event.type.value,
                    title=title,
                    message=message,
                    created_at=now,
                ))
                created += 1
            await db.commit()
            return created

    async def deliver_safely(self, event: SwapEvent) -> None:
        """Background entry point — logs and swallows every failure."""
        try:
            await self.deliver(event)
        except Exception:
            logger.warning(
                "Notification delivery failed",
                extra={
                    "swap_id": event.swap_id,
                    "actor_id": event.actor_id,
                    "notification_type": event.type.value,
                },
                exc_info=True,
            )

    async def _recently_sent(
        self, db: AsyncSession, recipient_id, event: SwapEvent, now: datetime,
    ) -> bool:
        result = await db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == recipient_id,
                Notification.swap_request_id == event.swap_id,
                Notification.type == event.type.value,
                Notification.created_at >= dedup_cutoff(now, self._window_days),
            ),
        )
        return result.scalar_one() > 0


class BackgroundNotifier:
    """SwapEventSink that defers delivery to a FastAPI background task."""

    def __init__(
        self, background_tasks: BackgroundTasks, dispatcher: NotificationDispatcher,
    ):
        self._background_tasks = background_tasks
        self._dispatcher = dispatcher

    async def dispatch(self, event: SwapEvent) -> None:
        self._background_tasks.add_task(self._dispatcher.deliver_safely, event)
