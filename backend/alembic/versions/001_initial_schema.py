"""Initial schema — profiles, books, swap_requests, notifications.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "books",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("owner_id", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "swap_requests",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("requester_id", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("owner_id", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("book_id", UUID(as_uuid=True), sa.ForeignKey("books.id"), nullable=False),
        sa.Column("offered_book_id", UUID(as_uuid=True), sa.ForeignKey("books.id"), nullable=False),
        sa.Column("counter_offered_book_id", UUID(as_uuid=True), sa.ForeignKey("books.id"), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("counter_offer_message", sa.Text, nullable=True),
        sa.Column("requester_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("owner_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("requester_rating", sa.Integer, nullable=True),
        sa.Column("owner_rating", sa.Integer, nullable=True),
        sa.Column("requester_feedback", sa.Text, nullable=True),
        sa.Column("owner_feedback", sa.Text, nullable=True),
        sa.Column("cancelled_by", UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("requester_id <> owner_id", name="ck_swap_distinct_parties"),
        sa.CheckConstraint(
            "counter_offered_book_id IS NULL OR status <> 'PENDING'",
            name="ck_swap_counter_offer_not_pending",
        ),
        sa.CheckConstraint(
            "(completed_at IS NOT NULL AND requester_completed_at IS NOT NULL"
            " AND owner_completed_at IS NOT NULL)"
            " OR (completed_at IS NULL AND (requester_completed_at IS NULL"
            " OR owner_completed_at IS NULL))",
            name="ck_swap_completed_at_and_gate",
        ),
        sa.CheckConstraint(
            "(status = 'COMPLETED' AND completed_at IS NOT NULL)"
            " OR (status <> 'COMPLETED' AND completed_at IS NULL)",
            name="ck_swap_completed_status",
        ),
        sa.CheckConstraint(
            "(status = 'CANCELLED' AND cancelled_by IS NOT NULL)"
            " OR (status <> 'CANCELLED' AND cancelled_by IS NULL)",
            name="ck_swap_cancelled_by",
        ),
        sa.CheckConstraint(
            "requester_rating IS NULL OR requester_rating BETWEEN 1 AND 5",
            name="ck_swap_requester_rating",
        ),
        sa.CheckConstraint(
            "owner_rating IS NULL OR owner_rating BETWEEN 1 AND 5",
            name="ck_swap_owner_rating",
        ),
    )
    op.create_index("ix_swap_requests_requester_id", "swap_requests", ["requester_id"])
    op.create_index("ix_swap_requests_owner_id", "swap_requests", ["owner_id"])

    op.create_table(
        "notifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column(
            "swap_request_id", UUID(as_uuid=True),
            sa.ForeignKey("swap_requests.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("actor_id", UUID(as_uuid=True), nullable=False),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_notifications_dedup", "notifications",
        ["user_id", "swap_request_id", "type", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_notifications_dedup", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_swap_requests_owner_id", table_name="swap_requests")
    op.drop_index("ix_swap_requests_requester_id", table_name="swap_requests")
    op.drop_table("swap_requests")
    op.drop_table("books")
    op.drop_table("profiles")
