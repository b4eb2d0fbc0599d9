"""Sweep Rules — pure decisions for one periodic sweep tick.

Invariants:
    - Reminders fire only while now is inside [anchor - offset, anchor - offset + REMINDER_WINDOW)
    - Offsets are 24h and 1h before the anchor (slot start or contract deadline)
    - Status only moves forward: SCHEDULED -> IN_PROGRESS on start, terminal on resolution
    - PENDING resolution never changes status (re-queried every tick until resolved)

Design Decisions:
    - Message text is part of the dedup signature, so it is built here and nowhere else
    - The engine feeds `now` in; nothing here reads the clock
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from slot_scheduler.core.date_arith import REMINDER_WINDOW, in_window, start_of_local_day
from slot_scheduler.core.domain_types import (
    ContractResolution, NotificationType, SWEEPABLE_STATUSES, SlotStatus,
)
from slot_scheduler.core.entities import NotificationDraft, ScheduledSlot


@dataclass(frozen=True)
class ReminderOffset:
    label: str
    before: timedelta


REMINDER_OFFSETS: tuple[ReminderOffset, ...] = (
    ReminderOffset("24H", timedelta(hours=24)),
    ReminderOffset("1H", timedelta(hours=1)),
)


def sweepable(slots: Iterable[ScheduledSlot]) -> list[ScheduledSlot]:
    """Non-terminal slots in deterministic (start_date, slot_id) order."""
    return sorted(
        (s for s in slots if s.status in SWEEPABLE_STATUSES),
        key=lambda s: (s.start_date, s.slot_id),
    )


def due_offsets(
    now: datetime, anchor: datetime, window: timedelta = REMINDER_WINDOW,
) -> list[ReminderOffset]:
    # shift now forward instead of the anchor back: anchors near year 1 stay representable
    return [o for o in REMINDER_OFFSETS if in_window(now + o.before, anchor, window)]


def meeting_reminders(
    slot: ScheduledSlot, now: datetime, window: timedelta = REMINDER_WINDOW,
) -> list[NotificationDraft]:
    start_at = start_of_local_day(slot.start_date)
    return [
        NotificationDraft(
            user_id=user_id,
            type=NotificationType.MEETING_REMINDER,
            reference_id=slot.slot_id,
            message=(
                f"MEETING_REMINDER_{offset.label}: Slot {slot.slot_id} starts at "
                f"{slot.start_date}. Meeting: {slot.meeting_link}"
            ),
        )
        for offset in due_offsets(now, start_at, window)
        for user_id in (slot.owner_id, slot.executive_id)
    ]


def deadline_alerts(
    slot: ScheduledSlot, now: datetime, window: timedelta = REMINDER_WINDOW,
) -> list[NotificationDraft]:
    if not slot.contract_deadline_date:
        return []
    deadline_at = start_of_local_day(slot.contract_deadline_date)
    return [
        NotificationDraft(
            user_id=user_id,
            type=NotificationType.DEADLINE_ALERT,
            reference_id=slot.contract_id,
            message=(
                f"DEADLINE_ALERT_{offset.label}: Contract {slot.contract_id} "
                f"deadline at {slot.contract_deadline_date}"
            ),
        )
        for offset in due_offsets(now, deadline_at, window)
        for user_id in (slot.owner_id, slot.executive_id)
    ]


def status_after_start(status: SlotStatus, start_date: str, now: datetime) -> SlotStatus:
    if status == SlotStatus.SCHEDULED and now >= start_of_local_day(start_date):
        return SlotStatus.IN_PROGRESS
    return status


def deadline_reached(slot: ScheduledSlot, now: datetime) -> bool:
    return bool(slot.contract_deadline_date) and now >= start_of_local_day(
        slot.contract_deadline_date,
    )


def status_after_resolution(
    status: SlotStatus, resolution: ContractResolution,
) -> SlotStatus:
    if resolution == ContractResolution.COMPLETED:
        return SlotStatus.COMPLETED
    if resolution == ContractResolution.BREACHED:
        return SlotStatus.CANCELED
    return status
