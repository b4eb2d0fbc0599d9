"""Entities — immutable value objects for calendars, slots, and notifications.

Invariants:
    - All entities are frozen: repositories hand out values, never shared mutable state
    - ExecutiveCalendar.availability holds at most one block per date, sorted ascending
    - ScheduledSlot.start_date <= ScheduledSlot.end_date
    - NotificationDraft.signature is the dedup tuple (user_id, type, reference_id, message)

Design Decisions:
    - Frozen dataclasses + tuples: a snapshot copy of the store is a shallow dict copy,
      since nothing reachable from an entity can be mutated in place
    - Status changes go through with_status(), which enforces the forward-only lifecycle
"""

from dataclasses import asdict, dataclass, replace
from datetime import datetime

from slot_scheduler.core.domain_types import (
    DailyBlockStatus, HOLDING_STATUSES, NotificationType,
    OPERATING_TIMEZONE, STATUS_TRANSITIONS, SlotStatus,
)


@dataclass(frozen=True)
class DailyBlock:
    date: str
    status: DailyBlockStatus


@dataclass(frozen=True)
class ExecutiveCalendar:
    executive_id: str
    availability: tuple[DailyBlock, ...]
    created_at: datetime
    updated_at: datetime
    timezone: str = OPERATING_TIMEZONE

    def dates_with(self, status: DailyBlockStatus) -> set[str]:
        return {b.date for b in self.availability if b.status == status}

    def to_dict(self) -> dict:
        return {
            "executive_id": self.executive_id,
            "availability": [
                {"date": b.date, "status": b.status.value} for b in self.availability
            ],
            "timezone": self.timezone,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class ScheduledSlot:
    id: str
    slot_id: str
    executive_id: str
    owner_id: str
    contract_id: str
    start_date: str
    end_date: str
    status: SlotStatus
    meeting_link: str
    created_at: datetime
    contract_deadline_date: str | None = None

    @property
    def holds_calendar(self) -> bool:
        """True while the slot occupies its days for overlap and calendar purposes."""
        return self.status in HOLDING_STATUSES

    def with_status(self, status: SlotStatus) -> "ScheduledSlot":
        """Copy with a new status. Same-status is a no-op; backwards moves raise ValueError."""
        if status == self.status:
            return self
        if status not in STATUS_TRANSITIONS[self.status]:
            raise ValueError(
                f"Illegal slot transition {self.status.value} -> {status.value}",
            )
        return replace(self, status=status)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        data["created_at"] = self.created_at.isoformat()
        return data


@dataclass(frozen=True)
class NotificationDraft:
    """Notification before persistence — what engines produce."""
    user_id: str
    type: NotificationType
    reference_id: str
    message: str

    @property
    def signature(self) -> tuple[str, NotificationType, str, str]:
        return (self.user_id, self.type, self.reference_id, self.message)


@dataclass(frozen=True)
class Notification:
    id: str
    user_id: str
    type: NotificationType
    reference_id: str
    message: str
    created_at: datetime
    read: bool = False

    @property
    def signature(self) -> tuple[str, NotificationType, str, str]:
        return (self.user_id, self.type, self.reference_id, self.message)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type.value,
            "reference_id": self.reference_id,
            "message": self.message,
            "read": self.read,
            "created_at": self.created_at.isoformat(),
        }
