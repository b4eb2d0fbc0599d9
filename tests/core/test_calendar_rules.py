"""Calendar Rules tests — pure derivations for availability, allocation, and cancellation.

Tests cover:
    - normalize_availability: last-wins dedup, date ordering, format validation
    - check_availability_conflicts against active and CANCELED slots
    - derive_slot_range arithmetic and parameter bounds
    - ensure_no_overlap: only SCHEDULED/IN_PROGRESS slots conflict
    - block_slot_range / rederive_after_cancel calendar derivation
    - notification message texts
"""

from datetime import datetime, timezone

import pytest

from slot_scheduler.core.calendar_rules import (
    auction_cleared_notifications, block_slot_range, cancellation_notification,
    check_availability_conflicts, derive_slot_range, ensure_no_overlap,
    normalize_availability, occupied_dates, rederive_after_cancel,
)
from slot_scheduler.core.domain_types import DailyBlockStatus, NotificationType, SlotStatus
from slot_scheduler.core.entities import DailyBlock, ExecutiveCalendar, ScheduledSlot
from slot_scheduler.core.errors import (
    AvailabilityConflictError, InvalidDateFormatError, InvalidRangeError, SlotOverlapError,
)

A = DailyBlockStatus.AVAILABLE
B = DailyBlockStatus.BLOCKED
T0 = datetime(2026, 2, 1, tzinfo=timezone.utc)


def _slot(slot_id="slot-1", start="2026-02-18", end="2026-02-20",
          status=SlotStatus.SCHEDULED, **kw) -> ScheduledSlot:
    return ScheduledSlot(
        id=f"id-{slot_id}",
        slot_id=slot_id,
        executive_id=kw.get("executive_id", "exec-1"),
        owner_id=kw.get("owner_id", "owner-1"),
        contract_id=kw.get("contract_id", "contract-1"),
        start_date=start,
        end_date=end,
        status=status,
        meeting_link="https://meet.google.com/abc-defg-hij",
        created_at=T0,
    )


def _calendar(*blocks: tuple[str, DailyBlockStatus]) -> ExecutiveCalendar:
    return ExecutiveCalendar(
        executive_id="exec-1",
        availability=tuple(DailyBlock(d, s) for d, s in blocks),
        created_at=T0,
        updated_at=T0,
    )


# -- normalize_availability ------------------------------------------------------

def test_normalize_last_occurrence_wins():
    blocks = normalize_availability([
        ("2026-02-18", A), ("2026-02-17", B), ("2026-02-18", B),
    ])
    assert blocks == (DailyBlock("2026-02-17", B), DailyBlock("2026-02-18", B))


def test_normalize_sorts_by_date():
    blocks = normalize_availability([("2026-03-01", A), ("2026-02-28", A)])
    assert [b.date for b in blocks] == ["2026-02-28", "2026-03-01"]


def test_normalize_accepts_raw_status_strings():
    (block,) = normalize_availability([("2026-02-18", "AVAILABLE")])
    assert block.status is DailyBlockStatus.AVAILABLE


def test_normalize_rejects_bad_date():
    with pytest.raises(InvalidDateFormatError):
        normalize_availability([("2026-2-18", A)])


def test_normalize_empty_is_empty():
    assert normalize_availability([]) == ()


# -- availability conflicts ------------------------------------------------------

def test_occupied_dates_skip_canceled_slots():
    slots = [
        _slot("a", "2026-02-18", "2026-02-19"),
        _slot("b", "2026-02-25", "2026-02-25", SlotStatus.CANCELED),
    ]
    assert occupied_dates(slots) == {"2026-02-18", "2026-02-19"}


def test_available_date_inside_active_slot_conflicts():
    blocks = normalize_availability([("2026-02-19", A)])
    with pytest.raises(AvailabilityConflictError) as exc:
        check_availability_conflicts("exec-1", blocks, [_slot()])
    assert exc.value.date == "2026-02-19"
    assert exc.value.http_status == 409


def test_blocked_date_inside_active_slot_is_fine():
    blocks = normalize_availability([("2026-02-19", B)])
    check_availability_conflicts("exec-1", blocks, [_slot()])


def test_completed_slot_still_occupies_its_days():
    blocks = normalize_availability([("2026-02-18", A)])
    with pytest.raises(AvailabilityConflictError):
        check_availability_conflicts(
            "exec-1", blocks, [_slot(status=SlotStatus.COMPLETED)],
        )


def test_canceled_slot_frees_its_days():
    blocks = normalize_availability([("2026-02-18", A)])
    check_availability_conflicts("exec-1", blocks, [_slot(status=SlotStatus.CANCELED)])


# -- derive_slot_range -----------------------------------------------------------

def test_derive_range_offset_and_duration():
    assert derive_slot_range("2026-02-16", 2, 3) == ("2026-02-18", "2026-02-20")


def test_derive_range_single_day_zero_offset():
    assert derive_slot_range("2026-02-16", 0, 1) == ("2026-02-16", "2026-02-16")


def test_derive_range_across_month():
    assert derive_slot_range("2026-02-27", 1, 3) == ("2026-02-28", "2026-03-02")


@pytest.mark.parametrize("offset,duration", [(-1, 1), (0, 0), (2, -3)])
def test_derive_range_rejects_out_of_bounds(offset, duration):
    with pytest.raises(InvalidRangeError):
        derive_slot_range("2026-02-16", offset, duration)


def test_derive_range_rejects_bad_auction_date():
    with pytest.raises(InvalidDateFormatError):
        derive_slot_range("16/02/2026", 1, 1)


# -- ensure_no_overlap -----------------------------------------------------------

def test_overlap_with_scheduled_slot_raises():
    with pytest.raises(SlotOverlapError) as exc:
        ensure_no_overlap("exec-1", "2026-02-20", "2026-02-22", [_slot()])
    assert exc.value.conflicting_slot_id == "slot-1"


def test_overlap_with_in_progress_slot_raises():
    with pytest.raises(SlotOverlapError):
        ensure_no_overlap(
            "exec-1", "2026-02-17", "2026-02-18", [_slot(status=SlotStatus.IN_PROGRESS)],
        )


@pytest.mark.parametrize("status", [SlotStatus.CANCELED, SlotStatus.COMPLETED])
def test_terminal_slots_do_not_block_allocation(status):
    ensure_no_overlap("exec-1", "2026-02-18", "2026-02-20", [_slot(status=status)])


def test_adjacent_range_is_allowed():
    ensure_no_overlap("exec-1", "2026-02-21", "2026-02-23", [_slot()])


# -- calendar derivation ---------------------------------------------------------

def test_block_range_on_missing_calendar():
    blocks = block_slot_range(None, "2026-02-18", "2026-02-19")
    assert blocks == (DailyBlock("2026-02-18", B), DailyBlock("2026-02-19", B))


def test_block_range_keeps_other_days():
    calendar = _calendar(("2026-02-10", A), ("2026-02-11", B), ("2026-02-18", A))
    blocks = block_slot_range(calendar, "2026-02-18", "2026-02-19")
    assert blocks == (
        DailyBlock("2026-02-10", A),
        DailyBlock("2026-02-11", B),
        DailyBlock("2026-02-18", B),
        DailyBlock("2026-02-19", B),
    )


def test_rederive_frees_days_of_removed_slot():
    calendar = _calendar(
        ("2026-02-18", B), ("2026-02-19", B), ("2026-02-25", B), ("2026-02-26", A),
    )
    remaining = [
        _slot("gone", status=SlotStatus.CANCELED),
        _slot("kept", "2026-02-25", "2026-02-25"),
    ]
    blocks = rederive_after_cancel(calendar, remaining)
    assert blocks == (
        DailyBlock("2026-02-18", A),
        DailyBlock("2026-02-19", A),
        DailyBlock("2026-02-25", B),
        DailyBlock("2026-02-26", A),
    )


def test_rederive_only_touches_known_dates():
    calendar = _calendar(("2026-02-18", B))
    blocks = rederive_after_cancel(calendar, [_slot("other", "2026-03-01", "2026-03-05")])
    assert [b.date for b in blocks] == ["2026-02-18"]


# -- notification texts ----------------------------------------------------------

def test_auction_cleared_notifies_owner_then_executive():
    owner, executive = auction_cleared_notifications(_slot())
    assert owner.user_id == "owner-1"
    assert owner.type is NotificationType.AUCTION_CLEARED
    assert owner.message == (
        "Auction cleared. Scheduled from 2026-02-18 to 2026-02-20. "
        "Meeting: https://meet.google.com/abc-defg-hij"
    )
    assert executive.user_id == "exec-1"
    assert executive.message.startswith("New scheduled slot slot-1 from 2026-02-18 to 2026-02-20")
    assert owner.reference_id == executive.reference_id == "slot-1"


def test_cancellation_notice_goes_to_owner():
    draft = cancellation_notification(_slot())
    assert draft.user_id == "owner-1"
    assert draft.type is NotificationType.DEADLINE_ALERT
    assert draft.message == (
        "Slot slot-1 canceled before start; reinvestment pool trigger should run."
    )
