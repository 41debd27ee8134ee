"""API Dependencies — actor identity and service wiring for route handlers.

Invariants:
    - The actor is whatever the auth gateway put in X-User-Id; missing or
      malformed → AuthenticationError (401)
    - Services receive the request-scoped session from get_db
    - Notifications go through a BackgroundNotifier: delivery starts after the
      response and uses its own session from db_manager

Design Decisions:
    - Clock is a dependency so tests can pin time via dependency_overrides
    - db_manager resolved at call time (get_db_manager), not import time
"""

from uuid import UUID

from fastapi import BackgroundTasks, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.errors import AuthenticationError
from app.core.repository_protocols import Clock
from app.infrastructure.clock import SystemClock
from app.infrastructure.database import get_db, get_db_manager
from app.infrastructure.notification_dispatcher import (
    BackgroundNotifier, NotificationDispatcher,
)
from app.services.book_directory import SqlBookDirectory
from app.services.notification_inbox import NotificationInbox
from app.services.swap_completion import CompletionTracker
from app.services.swap_lifecycle import SwapLifecycle
from app.services.swap_queries import SwapQueries


async def get_current_user_id(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
) -> UUID:
    if not x_user_id:
        raise AuthenticationError()
    try:
        return UUID(x_user_id)
    except ValueError:
        raise AuthenticationError("Malformed X-User-Id header")


def get_clock() -> Clock:
    return SystemClock()


def get_notifier(
    background_tasks: BackgroundTasks, clock: Clock = Depends(get_clock),
) -> BackgroundNotifier:
    dispatcher = NotificationDispatcher(
        get_db_manager(), clock,
        get_settings().notification_dedup_window_days,
    )
    return BackgroundNotifier(background_tasks, dispatcher)


def get_lifecycle(
    db: AsyncSession = Depends(get_db),
    notifier: BackgroundNotifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> SwapLifecycle:
    return SwapLifecycle(db, SqlBookDirectory(db, clock), notifier, clock)


def get_completion_tracker(
    db: AsyncSession = Depends(get_db),
    notifier: BackgroundNotifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> CompletionTracker:
    return CompletionTracker(db, SqlBookDirectory(db, clock), notifier, clock)


def get_swap_queries(db: AsyncSession = Depends(get_db)) -> SwapQueries:
    return SwapQueries(db)


def get_notification_inbox(db: AsyncSession = Depends(get_db)) -> NotificationInbox:
    return NotificationInbox(db)
