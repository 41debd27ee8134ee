"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - SwapId, UserId, BookId wrap UUIDs — never use bare UUID in domain logic
    - Rating is bounded 1–5 (integer)
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to the DB `status` column without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

SwapId = NewType("SwapId", UUID)
UserId = NewType("UserId", UUID)
BookId = NewType("BookId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

Rating = NewType("Rating", int)     # 1–5

MIN_RATING = 1
MAX_RATING = 5


# ─── Enums ───────────────────────────────────────────────────────

class SwapStatus(str, Enum):
    """Swap lifecycle states — maps to DB `status` column."""
    PENDING = "PENDING"
    COUNTER_OFFER = "COUNTER_OFFER"
    ACCEPTED = "ACCEPTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset({SwapStatus.COMPLETED, SwapStatus.CANCELLED})


class SwapAction(str, Enum):
    """Party-driven actions — keys of the transition table."""
    ACCEPT = "accept"
    COUNTER_OFFER = "counter_offer"
    ACCEPT_COUNTER_OFFER = "accept_counter_offer"
    CANCEL = "cancel"
    COMPLETE = "complete"


class PartyRole(str, Enum):
    """Which side of the swap a user is on."""
    REQUESTER = "requester"
    OWNER = "owner"


class CompletionProgress(str, Enum):
    """Derived dual-confirmation display state."""
    AWAITING_BOTH = "awaiting_both"
    AWAITING_OWNER = "awaiting_owner"
    AWAITING_REQUESTER = "awaiting_requester"
    FULLY_COMPLETED = "fully_completed"


class NotificationType(str, Enum):
    """Side-effect events emitted after a committed transition."""
    SWAP_REQUEST = "SWAP_REQUEST"
    SWAP_ACCEPTED = "SWAP_ACCEPTED"
    SWAP_COUNTER_OFFER = "SWAP_COUNTER_OFFER"
    SWAP_CANCELLED = "SWAP_CANCELLED"
    SWAP_COMPLETED = "SWAP_COMPLETED"
