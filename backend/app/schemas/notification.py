"""Notification Schemas — recipient-facing inbox contracts."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.core.domain_types import NotificationType


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    swap_request_id: UUID
    actor_id: UUID
    type: NotificationType
    title: str
    message: str
    is_read: bool
    created_at: datetime


class Pagination(BaseModel):
    limit: int
    offset: int
    has_more: bool


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int
    pagination: Pagination


class MarkAllReadResponse(BaseModel):
    updated: int
