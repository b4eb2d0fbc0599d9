"""Notification ORM — user-facing alerts produced by scheduling and the sweep.

Invariants:
    - (user_id, type, reference_id, message) is the sweep dedup signature
    - read only moves false -> true

Design Decisions:
    - Signature index is non-unique: direct pushes may legitimately repeat a signature
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Index, String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from slot_scheduler.db.base import Base


class NotificationRecord(Base):
    """Notification row."""
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_signature", "user_id", "type", "reference_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    reference_id: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
