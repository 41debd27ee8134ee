"""Conflict Retry — re-run a whole operation after a lost compare-and-set.

Invariants:
    - Only ConcurrencyError is retried; every other error propagates on first sight
    - The operation is re-invoked from scratch, so it re-reads the row and re-checks
      its precondition (a retry may legitimately end in InvalidTransition)
    - After the last attempt the caller sees ConcurrencyError with the refresh message
"""

import logging
from typing import Awaitable, Callable, TypeVar

from app.core.errors import ConcurrencyError
from app.services.swap_lifecycle import REFRESH_MESSAGE

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_with_conflict_retry(
    operation: Callable[[], Awaitable[T]], retries: int = 1,
) -> T:
    attempt = 0
    while True:
        try:
            return await operation()
        except ConcurrencyError as exc:
            if attempt >= retries:
                exc.context.user_message = REFRESH_MESSAGE
                raise
            attempt += 1
            logger.warning(
                "Retrying after concurrent modification",
                extra={
                    "swap_id": exc.context.swap_id,
                    "actor_id": exc.context.actor_id,
                    "attempt": attempt,
                },
            )
