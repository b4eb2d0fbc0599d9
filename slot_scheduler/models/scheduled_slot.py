"""ScheduledSlot ORM — a whole-day range allocated to one executive/owner pair.

Invariants:
    - id is UUID primary key; slot_id is the external, unique, human-facing id
    - start_date/end_date are YYYY-MM-DD strings, inclusive, start <= end
    - status in SCHEDULED | IN_PROGRESS | COMPLETED | CANCELED

Design Decisions:
    - Dates stored as strings: day granularity only, lexicographic order == calendar order
    - executive_id indexed: overlap checks and calendar re-derivation list by executive
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from slot_scheduler.db.base import Base


class SlotRecord(Base):
    """Scheduled slot row."""
    __tablename__ = "scheduled_slots"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    slot_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    executive_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contract_id: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[str] = mapped_column(String(10), nullable=False)
    end_date: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    meeting_link: Mapped[str] = mapped_column(Text, nullable=False)
    contract_deadline_date: Mapped[str | None] = mapped_column(
        String(10), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
