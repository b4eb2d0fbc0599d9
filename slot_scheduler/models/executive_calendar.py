"""ExecutiveCalendar ORM — per-executive daily availability.

Invariants:
    - executive_id is the primary key: one calendar per executive
    - availability is the full, date-sorted list of {date, status}; replaced on every write
    - timezone is always the operating timezone

Design Decisions:
    - JSON column for availability: the calendar is always read and written whole
      (derive-and-replace), so per-day rows would only add joins
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from slot_scheduler.core.domain_types import OPERATING_TIMEZONE
from slot_scheduler.db.base import Base


class CalendarRecord(Base):
    """Executive calendar row."""
    __tablename__ = "executive_calendars"

    executive_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    availability: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    timezone: Mapped[str] = mapped_column(
        String(64), nullable=False, default=OPERATING_TIMEZONE,
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
