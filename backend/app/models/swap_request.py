"""SwapRequest ORM — persists the single negotiated-exchange aggregate.

Invariants:
    - id is UUID primary key
    - requester_id != owner_id (CHECK)
    - counter_offered_book_id is NULL while PENDING (CHECK)
    - completed_at NOT NULL iff both party completion timestamps NOT NULL (CHECK)
    - status = COMPLETED iff completed_at NOT NULL (CHECK)
    - cancelled_by NOT NULL iff status = CANCELLED (CHECK)
    - ratings NULL or within 1–5 (CHECK)

Design Decisions:
    - Invariants enforced as CHECK constraints: a buggy writer fails loudly at commit
      instead of leaving a half-completed row (ADR: DB is the authoritative state)
    - status stored as String(20) with SwapStatus values: matches conditional writes
      of the form WHERE status = :expected
    - No relationships loaded: the negotiation engine reads only this row
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class SwapRequest(Base):
    """A proposed book exchange between a requester and an owner."""
    __tablename__ = "swap_requests"
    __table_args__ = (
        CheckConstraint(
            "requester_id <> owner_id", name="ck_swap_distinct_parties",
        ),
        CheckConstraint(
            "counter_offered_book_id IS NULL OR status <> 'PENDING'",
            name="ck_swap_counter_offer_not_pending",
        ),
        CheckConstraint(
            "(completed_at IS NOT NULL AND requester_completed_at IS NOT NULL"
            " AND owner_completed_at IS NOT NULL)"
            " OR (completed_at IS NULL AND (requester_completed_at IS NULL"
            " OR owner_completed_at IS NULL))",
            name="ck_swap_completed_at_and_gate",
        ),
        CheckConstraint(
            "(status = 'COMPLETED' AND completed_at IS NOT NULL)"
            " OR (status <> 'COMPLETED' AND completed_at IS NULL)",
            name="ck_swap_completed_status",
        ),
        CheckConstraint(
            "(status = 'CANCELLED' AND cancelled_by IS NOT NULL)"
            " OR (status <> 'CANCELLED' AND cancelled_by IS NULL)",
            name="ck_swap_cancelled_by",
        ),
        CheckConstraint(
            "requester_rating IS NULL OR requester_rating BETWEEN 1 AND 5",
            name="ck_swap_requester_rating",
        ),
        CheckConstraint(
            "owner_rating IS NULL OR owner_rating BETWEEN 1 AND 5",
            name="ck_swap_owner_rating",
        ),
        Index("ix_swap_requests_requester_id", "requester_id"),
        Index("ix_swap_requests_owner_id", "owner_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    requester_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("books.id"), nullable=False,
    )
    offered_book_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("books.id"), nullable=False,
    )
    counter_offered_book_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("books.id"), nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="PENDING",
    )
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    counter_offer_message: Mapped[str | None] = mapped_column(
        Text, nullable=True,
    )

    # Dual completion
    requester_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    owner_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    # Feedback (rating given BY that party)
    requester_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    owner_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    requester_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Audit
    cancelled_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
