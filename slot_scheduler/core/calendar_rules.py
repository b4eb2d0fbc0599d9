"""Calendar Rules — pure derivations behind availability updates, allocation, and cancellation.

Invariants:
    - Availability input: last occurrence per date wins, output sorted by date
    - A date cannot be AVAILABLE while a non-CANCELED slot occupies it
    - Allocation: new range must not intersect any SCHEDULED/IN_PROGRESS slot of the executive
    - Calendar is always derived and replaced in full, never patched incrementally

Design Decisions:
    - Pure functions over entities: the scheduling engine does IO, these decide
    - Errors raised here are raised before the engine performs any write
"""

from collections.abc import Iterable

from slot_scheduler.core.date_arith import add_days, enumerate_dates, overlaps, validate_day_only
from slot_scheduler.core.domain_types import DailyBlockStatus, NotificationType, SlotStatus
from slot_scheduler.core.entities import (
    DailyBlock, ExecutiveCalendar, NotificationDraft, ScheduledSlot,
)
from slot_scheduler.core.errors import (
    AvailabilityConflictError, InvalidRangeError, SlotOverlapError,
)


def normalize_availability(
    entries: Iterable[tuple[str, DailyBlockStatus]],
) -> tuple[DailyBlock, ...]:
    """Validate dates, keep the final status per date, sort ascending."""
    by_date: dict[str, DailyBlockStatus] = {}
    for day, status in entries:
        by_date[validate_day_only(day)] = DailyBlockStatus(status)
    return tuple(DailyBlock(d, by_date[d]) for d in sorted(by_date))


def occupied_dates(slots: Iterable[ScheduledSlot]) -> set[str]:
    """Every day covered by a slot that is not CANCELED."""
    days: set[str] = set()
    for slot in slots:
        if slot.status != SlotStatus.CANCELED:
            days.update(enumerate_dates(slot.start_date, slot.end_date))
    return days


def check_availability_conflicts(
    executive_id: str,
    blocks: Iterable[DailyBlock],
    slots: Iterable[ScheduledSlot],
) -> None:
    """Raise AvailabilityConflictError on the first AVAILABLE date already occupied."""
    taken = occupied_dates(slots)
    for block in blocks:
        if block.status == DailyBlockStatus.AVAILABLE and block.date in taken:
            raise AvailabilityConflictError(executive_id, block.date)


def derive_slot_range(
    auction_end_date: str, tier_offset_days: int, tier_duration_days: int,
) -> tuple[str, str]:
    """start = auction end + offset; end = start + (duration - 1)."""
    validate_day_only(auction_end_date)
    if tier_offset_days < 0:
        raise InvalidRangeError(
            f"tier_offset_days must be >= 0, got {tier_offset_days}",
        )
    if tier_duration_days < 1:
        raise InvalidRangeError(
            f"tier_duration_days must be >= 1, got {tier_duration_days}",
        )
    start = add_days(auction_end_date, tier_offset_days)
    end = add_days(start, tier_duration_days - 1)
    return start, end


def ensure_no_overlap(
    executive_id: str, start: str, end: str, slots: Iterable[ScheduledSlot],
) -> None:
    """Raise SlotOverlapError if [start, end] hits a slot still holding its days."""
    for slot in slots:
        if slot.holds_calendar and overlaps(start, end, slot.start_date, slot.end_date):
            raise SlotOverlapError(executive_id, slot.slot_id)


def block_slot_range(
    calendar: ExecutiveCalendar | None, start: str, end: str,
) -> tuple[DailyBlock, ...]:
    """Existing BLOCKED days plus the new range become BLOCKED; other AVAILABLE days stay."""
    current = calendar.availability if calendar else ()
    blocked = {b.date for b in current if b.status == DailyBlockStatus.BLOCKED}
    blocked.update(enumerate_dates(start, end))
    available = {
        b.date for b in current
        if b.status == DailyBlockStatus.AVAILABLE and b.date not in blocked
    }
    merged = [DailyBlock(d, DailyBlockStatus.BLOCKED) for d in blocked]
    merged += [DailyBlock(d, DailyBlockStatus.AVAILABLE) for d in available]
    return tuple(sorted(merged, key=lambda b: b.date))


def rederive_after_cancel(
    calendar: ExecutiveCalendar, remaining_slots: Iterable[ScheduledSlot],
) -> tuple[DailyBlock, ...]:
    """Re-partition every known date: BLOCKED iff a slot still holding days covers it."""
    still_blocked: set[str] = set()
    for slot in remaining_slots:
        if slot.holds_calendar:
            still_blocked.update(enumerate_dates(slot.start_date, slot.end_date))
    return tuple(sorted(
        (
            DailyBlock(
                b.date,
                DailyBlockStatus.BLOCKED if b.date in still_blocked
                else DailyBlockStatus.AVAILABLE,
            )
            for b in calendar.availability
        ),
        key=lambda b: b.date,
    ))


def auction_cleared_notifications(slot: ScheduledSlot) -> list[NotificationDraft]:
    """One notice to the owner and one to the executive."""
    return [
        NotificationDraft(
            user_id=slot.owner_id,
            type=NotificationType.AUCTION_CLEARED,
            reference_id=slot.slot_id,
            message=(
                f"Auction cleared. Scheduled from {slot.start_date} to {slot.end_date}. "
                f"Meeting: {slot.meeting_link}"
            ),
        ),
        NotificationDraft(
            user_id=slot.executive_id,
            type=NotificationType.AUCTION_CLEARED,
            reference_id=slot.slot_id,
            message=(
                f"New scheduled slot {slot.slot_id} from {slot.start_date} to "
                f"{slot.end_date}. Meeting: {slot.meeting_link}"
            ),
        ),
    ]


def cancellation_notification(slot: ScheduledSlot) -> NotificationDraft:
    """Owner-facing alert that picks up reinvestment downstream."""
    return NotificationDraft(
        user_id=slot.owner_id,
        type=NotificationType.DEADLINE_ALERT,
        reference_id=slot.slot_id,
        message=(
            f"Slot {slot.slot_id} canceled before start; "
            "reinvestment pool trigger should run."
        ),
    )
