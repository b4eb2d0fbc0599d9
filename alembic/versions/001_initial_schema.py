"""Initial schema — executive_calendars, scheduled_slots, notifications.

Revision ID: 001_initial
Revises: None
Create Date: 2026-02-16

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
        "executive_calendars",
        sa.Column("executive_id", sa.String(255), primary_key=True),
        sa.Column("availability", sa.JSON, nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="America/Sao_Paulo"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "scheduled_slots",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("slot_id", sa.String(255), nullable=False, unique=True),
        sa.Column("executive_id", sa.String(255), nullable=False),
        sa.Column("owner_id", sa.String(255), nullable=False),
        sa.Column("contract_id", sa.String(255), nullable=False),
        sa.Column("start_date", sa.String(10), nullable=False),
        sa.Column("end_date", sa.String(10), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("meeting_link", sa.Text, nullable=False),
        sa.Column("contract_deadline_date", sa.String(10), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_scheduled_slots_executive_id", "scheduled_slots", ["executive_id"])
    op.create_index("ix_scheduled_slots_owner_id", "scheduled_slots", ["owner_id"])

    op.create_table(
        "notifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("reference_id", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index(
        "ix_notifications_signature", "notifications",
        ["user_id", "type", "reference_id"],
    )


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("scheduled_slots")
    op.drop_table("executive_calendars")
