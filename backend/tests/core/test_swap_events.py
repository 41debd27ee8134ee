"""Swap Events — recipient policy, notification text and the dedup cutoff."""

from datetime import timedelta
from uuid import uuid4

import pytest

from app.core.domain_types import NotificationType
from app.core.swap_events import (
    DEFAULT_DEDUP_WINDOW_DAYS,
    SwapEvent,
    dedup_cutoff,
    format_notification,
    notification_recipients,
)
from tests.core.swap_records import OWNER, REQUESTER, T0


@pytest.mark.parametrize("event_type, actor, expected", [
    (NotificationType.SWAP_REQUEST, REQUESTER, [OWNER]),
    (NotificationType.SWAP_ACCEPTED, OWNER, [REQUESTER]),
    (NotificationType.SWAP_ACCEPTED, REQUESTER, [OWNER]),
    (NotificationType.SWAP_COUNTER_OFFER, OWNER, [REQUESTER]),
    (NotificationType.SWAP_CANCELLED, REQUESTER, [OWNER]),
    (NotificationType.SWAP_CANCELLED, OWNER, [REQUESTER]),
    (NotificationType.SWAP_COMPLETED, OWNER, [REQUESTER, OWNER]),
])
def test_recipients(event_type, actor, expected):
    assert notification_recipients(event_type, REQUESTER, OWNER, actor) == expected


def test_every_type_has_text():
    for event_type in NotificationType:
        title, message = format_notification(event_type)
        assert title
        assert message


def test_dedup_cutoff_default_window():
    assert DEFAULT_DEDUP_WINDOW_DAYS == 4
    assert dedup_cutoff(T0) == T0 - timedelta(days=4)
    assert dedup_cutoff(T0, 1) == T0 - timedelta(days=1)


def test_event_defaults_to_aware_timestamp():
    event = SwapEvent(
        type=NotificationType.SWAP_REQUEST, swap_id=uuid4(), actor_id=REQUESTER,
    )
    assert event.occurred_at.tzinfo is not None
