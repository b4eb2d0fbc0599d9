"""Calendar Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - Identifiers are non-empty strings
    - tier_offset_days >= 0, tier_duration_days >= 1
    - Day strings are length-checked here; their format is validated by core/date_arith

Design Decisions:
    - Literal/Enum types over str: Pydantic rejects unknown statuses natively
    - Date format errors surface as INVALID_DATE_FORMAT from the core, not as
      generic validation errors, so both API and direct callers see the same code
"""

from datetime import datetime

from pydantic import BaseModel, Field

from slot_scheduler.core.domain_types import DailyBlockStatus, NotificationType


class DailyBlockIn(BaseModel):
    date: str
    status: DailyBlockStatus


class AvailabilityUpdate(BaseModel):
    """Full replacement of an executive's availability."""
    availability: list[DailyBlockIn]


class ScheduleRequest(BaseModel):
    """Auction outcome that allocates a slot."""
    executive_id: str = Field(min_length=1)
    owner_id: str = Field(min_length=1)
    contract_id: str = Field(min_length=1)
    auction_end_date: str = Field(min_length=10)
    tier_offset_days: int = Field(ge=0)
    tier_duration_days: int = Field(ge=1)
    contract_deadline_date: str | None = Field(None, min_length=10)


class CancelRequest(BaseModel):
    now_date: str = Field(min_length=10)


class PushNotificationIn(BaseModel):
    type: NotificationType
    reference_id: str = Field(min_length=1)
    message: str = Field(min_length=1)


class NotifyRequest(BaseModel):
    """Push new notifications and/or mark existing ones read."""
    notifications: list[PushNotificationIn] | None = None
    mark_read_ids: list[str] | None = None


class SweepRequest(BaseModel):
    """Manual sweep trigger; `now` defaults to the current UTC time."""
    now: datetime | None = None
