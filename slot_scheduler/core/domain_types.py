"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - DayString is always a validated YYYY-MM-DD string (see date_arith.validate_day_only)
    - OPERATING_TIMEZONE is the single timezone for the whole system
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to DB string columns without custom encoders
"""

from datetime import timedelta, timezone
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ExecutiveId = NewType("ExecutiveId", str)
OwnerId = NewType("OwnerId", str)
SlotId = NewType("SlotId", str)
ContractId = NewType("ContractId", str)


# ─── Value Types ─────────────────────────────────────────────────

DayString = NewType("DayString", str)    # YYYY-MM-DD


# ─── Operating Timezone ──────────────────────────────────────────

OPERATING_TIMEZONE = "America/Sao_Paulo"
# Sao Paulo has observed no DST since 2019; local midnight is 03:00 UTC
OPERATING_UTC_OFFSET = timezone(timedelta(hours=-3), OPERATING_TIMEZONE)


# ─── Enums ───────────────────────────────────────────────────────

class DailyBlockStatus(str, Enum):
    """Per-day availability state of an executive's calendar."""
    AVAILABLE = "AVAILABLE"
    BLOCKED = "BLOCKED"


class SlotStatus(str, Enum):
    """Slot lifecycle — SCHEDULED -> IN_PROGRESS -> COMPLETED | CANCELED."""
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


class NotificationType(str, Enum):
    DEADLINE_ALERT = "DEADLINE_ALERT"
    MEETING_REMINDER = "MEETING_REMINDER"
    AUCTION_CLEARED = "AUCTION_CLEARED"


class ContractResolution(str, Enum):
    """Outcome reported by the external contract-resolution capability."""
    COMPLETED = "COMPLETED"
    BREACHED = "BREACHED"
    PENDING = "PENDING"


class UserRole(str, Enum):
    """Caller roles extracted by the HTTP shell."""
    EXECUTIVE = "EXECUTIVE"
    OWNER = "OWNER"
    SYSTEM = "SYSTEM"


# Slots that still hold calendar days and are eligible for overlap checks
HOLDING_STATUSES = frozenset({SlotStatus.SCHEDULED, SlotStatus.IN_PROGRESS})

# Slots the sweep still evaluates
SWEEPABLE_STATUSES = HOLDING_STATUSES

# Allowed forward transitions; anything else is a no-op or a bug
STATUS_TRANSITIONS: dict[SlotStatus, frozenset[SlotStatus]] = {
    SlotStatus.SCHEDULED: frozenset({
        SlotStatus.IN_PROGRESS, SlotStatus.COMPLETED, SlotStatus.CANCELED,
    }),
    SlotStatus.IN_PROGRESS: frozenset({SlotStatus.COMPLETED, SlotStatus.CANCELED}),
    SlotStatus.COMPLETED: frozenset(),
    SlotStatus.CANCELED: frozenset(),
}
