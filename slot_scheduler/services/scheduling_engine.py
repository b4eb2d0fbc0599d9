"""Scheduling Engine — availability updates, slot allocation, and pre-start cancellation.

Invariants:
    - Every public method runs as exactly one unit of work (run_in_transaction)
    - All invariant checks (duplicate, overlap, availability, already-started) run
      against committed state before any write of that unit of work
    - Calendar is re-derived and replaced in full after every slot mutation
    - Meeting provisioning happens inside the unit of work; its failure leaves no slot behind

Design Decisions:
    - Thin async shell around pure core/calendar_rules: IO here, decisions there
    - Input formats validated before opening the unit of work (cheap rejections)
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from slot_scheduler.core.calendar_rules import (
    auction_cleared_notifications, block_slot_range, cancellation_notification,
    check_availability_conflicts, derive_slot_range, ensure_no_overlap,
    normalize_availability, rederive_after_cancel,
)
from slot_scheduler.core.date_arith import start_of_local_day, validate_day_only
from slot_scheduler.core.domain_types import DailyBlockStatus, SlotStatus
from slot_scheduler.core.entities import ExecutiveCalendar, ScheduledSlot
from slot_scheduler.core.errors import (
    AlreadyStartedError, DuplicateSlotError, ExternalProvisioningError,
    SchedulerError, SlotNotFoundError,
)
from slot_scheduler.core.repository_protocols import (
    MeetingProvider, RepositoryBundle, TransactionManager,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarView:
    """Read-only calendar plus the slots the caller may see."""
    calendar: ExecutiveCalendar
    scheduled_slots: list[ScheduledSlot] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "calendar": self.calendar.to_dict(),
            "scheduled_slots": [s.to_dict() for s in self.scheduled_slots],
        }


def _empty_calendar(executive_id: str) -> ExecutiveCalendar:
    now = datetime.now(timezone.utc)
    return ExecutiveCalendar(
        executive_id=executive_id, availability=(), created_at=now, updated_at=now,
    )


class SchedulingEngine:
    """Owns the calendar/slot consistency rules for all executives."""

    def __init__(self, tx: TransactionManager, meet_provider: MeetingProvider):
        self._tx = tx
        self._meet = meet_provider

    async def set_availability(
        self,
        executive_id: str,
        entries: Iterable[tuple[str, DailyBlockStatus]],
    ) -> ExecutiveCalendar:
        """Replace the executive's availability with the de-duplicated entries."""
        blocks = normalize_availability(entries)

        async def work(repos: RepositoryBundle) -> ExecutiveCalendar:
            slots = await repos.slots.list_by_executive_id(executive_id)
            check_availability_conflicts(executive_id, blocks, slots)
            return await repos.calendars.upsert(executive_id, blocks)

        calendar = await self._tx.run_in_transaction(work)
        logger.info(
            f"Availability replaced ({len(blocks)} days)",
            extra={"executive_id": executive_id},
        )
        return calendar

    async def get_calendar_view(
        self, executive_id: str, owner_id: str | None = None,
    ) -> CalendarView:
        """Calendar and slots; restricted to one owner's slots when owner_id is given."""

        async def work(repos: RepositoryBundle) -> CalendarView:
            calendar = await repos.calendars.get_by_executive_id(executive_id)
            if owner_id is not None:
                slots = [
                    s for s in await repos.slots.list_by_owner_id(owner_id)
                    if s.executive_id == executive_id
                ]
            else:
                slots = await repos.slots.list_by_executive_id(executive_id)
            slots.sort(key=lambda s: (s.start_date, s.slot_id))
            return CalendarView(calendar or _empty_calendar(executive_id), slots)

        return await self._tx.run_in_transaction(work)

    async def schedule_after_auction(
        self,
        slot_id: str,
        executive_id: str,
        owner_id: str,
        contract_id: str,
        auction_end_date: str,
        tier_offset_days: int,
        tier_duration_days: int,
        contract_deadline_date: str | None = None,
    ) -> ScheduledSlot:
        """Allocate the slot derived from the auction outcome."""
        start, end = derive_slot_range(
            auction_end_date, tier_offset_days, tier_duration_days,
        )
        if contract_deadline_date is not None:
            # the sweep anchors deadline alerts on this instant
            start_of_local_day(contract_deadline_date)

        async def work(repos: RepositoryBundle) -> ScheduledSlot:
            if await repos.slots.find_by_slot_id(slot_id):
                raise DuplicateSlotError(slot_id)

            executive_slots = await repos.slots.list_by_executive_id(executive_id)
            ensure_no_overlap(executive_id, start, end, executive_slots)

            link = await self._provision_meeting(slot_id, executive_id, owner_id)

            slot = await repos.slots.create(
                slot_id=slot_id,
                executive_id=executive_id,
                owner_id=owner_id,
                contract_id=contract_id,
                start_date=start,
                end_date=end,
                status=SlotStatus.SCHEDULED,
                meeting_link=link,
                contract_deadline_date=contract_deadline_date,
            )

            calendar = await repos.calendars.get_by_executive_id(executive_id)
            await repos.calendars.upsert(
                executive_id, block_slot_range(calendar, start, end),
            )
            await repos.notifications.create_many(auction_cleared_notifications(slot))
            return slot

        slot = await self._tx.run_in_transaction(work)
        logger.info(
            f"Slot scheduled {slot.start_date}..{slot.end_date}",
            extra={"slot_id": slot_id, "executive_id": executive_id},
        )
        return slot

    async def cancel_before_start(self, slot_id: str, now_date: str) -> ScheduledSlot:
        """Cancel a slot strictly before its start day and free its calendar days."""
        today = validate_day_only(now_date)

        async def work(repos: RepositoryBundle) -> ScheduledSlot:
            slot = await repos.slots.find_by_slot_id(slot_id)
            if slot is None:
                raise SlotNotFoundError(slot_id)
            if slot.start_date <= today or slot.status == SlotStatus.COMPLETED:
                raise AlreadyStartedError(slot_id)
            if slot.status == SlotStatus.CANCELED:
                return slot

            updated = await repos.slots.update_status(slot_id, SlotStatus.CANCELED)

            calendar = await repos.calendars.get_by_executive_id(slot.executive_id)
            if calendar is not None:
                remaining = await repos.slots.list_by_executive_id(slot.executive_id)
                await repos.calendars.upsert(
                    slot.executive_id, rederive_after_cancel(calendar, remaining),
                )

            await repos.notifications.create_many([cancellation_notification(slot)])
            return updated

        slot = await self._tx.run_in_transaction(work)
        logger.info(
            "Slot canceled before start",
            extra={"slot_id": slot_id, "executive_id": slot.executive_id},
        )
        return slot

    async def _provision_meeting(
        self, slot_id: str, executive_id: str, owner_id: str,
    ) -> str:
        try:
            return await self._meet.create_meeting(slot_id, executive_id, owner_id)
        except SchedulerError:
            raise
        except Exception as e:
            logger.error(
                f"Meeting provisioning failed: {e}",
                extra={"slot_id": slot_id, "error_code": "EXTERNAL_PROVISIONING_FAILURE"},
            )
            raise ExternalProvisioningError(slot_id, str(e)) from e
