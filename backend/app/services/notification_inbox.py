"""Notification Inbox — the recipient's view of delivered notifications.

Invariants:
    - Every query is scoped to the recipient: another user's notification is
      Forbidden, a missing one NotFound
    - Newest first; unread_count covers the whole inbox, not just the page
    - Marking read is idempotent

Design Decisions:
    - Writes are plain UPDATE/DELETE without a status guard: is_read only ever
      moves false → true, so concurrent marks cannot conflict
"""

import logging
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ErrorContext, ForbiddenError, ResourceNotFoundError
from app.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationInbox:
    """List, mark read and delete notifications for one recipient."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(
        self, user_id: UUID, limit: int = 20, offset: int = 0,
    ) -> dict:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id)
            .limit(limit)
            .offset(offset),
        )
        notifications = list(result.scalars().all())
        return {
            "notifications": notifications,
            "unread_count": await self.unread_count(user_id),
            "pagination": {
                "limit": limit,
                "offset": offset,
                "has_more": len(notifications) == limit,
            },
        }

    async def unread_count(self, user_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            ),
        )
        return result.scalar_one()

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> Notification:
        notification = await self._owned(notification_id, user_id)
        if not notification.is_read:
            notification.is_read = True
            await self.db.commit()
        return notification

    async def mark_all_read(self, user_id: UUID) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False),
        )
        await self.db.commit()
        logger.info(
            f"Marked {result.rowcount} notifications read",
            extra={"actor_id": user_id},
        )
        return result.rowcount

    async def delete(self, notification_id: UUID, user_id: UUID) -> None:
        await self._owned(notification_id, user_id)
        await self.db.execute(
            delete(Notification)
            .where(Notification.id == notification_id)
            .execution_options(synchronize_session=False),
        )
        await self.db.commit()

    async def _owned(self, notification_id: UUID, user_id: UUID) -> Notification:
        context = ErrorContext(actor_id=user_id)
        notification = await self.db.get(
            Notification, notification_id, populate_existing=True,
        )
        if notification is None:
            raise ResourceNotFoundError(
                "Notification", str(notification_id), context,
            )
        if notification.user_id != user_id:
            raise ForbiddenError(
                "You can only manage your own notifications.", context,
            )
        return notification
