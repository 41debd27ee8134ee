"""Notifications — the actor's in-app inbox fed by the notification dispatcher.

Invariants:
    - Scoped to the X-User-Id actor; other users' notifications are 403
    - limit in [1, 100], offset ≥ 0 (400 otherwise)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_current_user_id, get_notification_inbox
from app.schemas.notification import (
    MarkAllReadResponse, NotificationListResponse, NotificationResponse,
)
from app.services.notification_inbox import NotificationInbox

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: UUID = Depends(get_current_user_id),
    inbox: NotificationInbox = Depends(get_notification_inbox),
):
    """Newest first, with the total unread count."""
    return await inbox.list_for_user(user_id, limit, offset)


@router.post("/mark-all-read", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(
    user_id: UUID = Depends(get_current_user_id),
    inbox: NotificationInbox = Depends(get_notification_inbox),
):
    return {"updated": await inbox.mark_all_read(user_id)}


@router.put("/{notification_id}", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    inbox: NotificationInbox = Depends(get_notification_inbox),
):
    return await inbox.mark_read(notification_id, user_id)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    inbox: NotificationInbox = Depends(get_notification_inbox),
):
    await inbox.delete(notification_id, user_id)
