"""Date Arithmetic — day-only date validation, arithmetic, and time-window checks.

Invariants:
    - All scheduling dates are YYYY-MM-DD strings; format is validated, calendar validity is not
      (2026-02-30 passes validate_day_only)
    - Day arithmetic is computed in UTC, never in local time
    - start_of_local_day maps a day to local midnight of OPERATING_TIMEZONE, expressed in UTC
    - in_window is half-open: [target, target + window)

Design Decisions:
    - Day strings compare lexicographically in calendar order, so range checks stay string-based
    - Pattern-valid but calendar-invalid days roll over in arithmetic (Feb 30 + 0 -> Mar 2),
      the same way a UTC date object normalises day overflow
    - Year 0000 is a format error; stepping past year 1 or 9999 is a range error
"""

import re
from datetime import date, datetime, time, timedelta, timezone

from slot_scheduler.core.domain_types import DayString, OPERATING_UTC_OFFSET
from slot_scheduler.core.errors import InvalidDateFormatError, InvalidRangeError

_DAY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

REMINDER_WINDOW = timedelta(hours=1)


def validate_day_only(value: str) -> DayString:
    """Return value unchanged if it matches YYYY-MM-DD, else raise InvalidDateFormatError."""
    if not isinstance(value, str) or not _DAY_PATTERN.match(value):
        raise InvalidDateFormatError(str(value))
    return DayString(value)


def _to_date(value: str) -> date:
    validate_day_only(value)
    year, month, day = (int(part) for part in value.split("-"))
    if not 1 <= month <= 12 or day < 1:
        raise InvalidDateFormatError(value)
    try:
        first = date(year, month, 1)
    except ValueError as e:
        raise InvalidDateFormatError(value) from e
    return _shift(first, day - 1)


def _shift(base: date, days: int) -> date:
    try:
        return base + timedelta(days=days)
    except OverflowError as e:
        raise InvalidRangeError(
            f"{base.isoformat()} shifted by {days} days leaves the supported calendar",
        ) from e


def add_days(value: str, days: int) -> DayString:
    """Calendar date `days` after value (negative allowed)."""
    shifted = _shift(_to_date(value), days)
    return DayString(shifted.isoformat())


def enumerate_dates(start: str, end: str) -> list[DayString]:
    """Inclusive, ordered sequence of days from start to end."""
    validate_day_only(start)
    validate_day_only(end)
    if start > end:
        raise InvalidRangeError(f"start date {start} must be <= end date {end}")

    result: list[DayString] = []
    cursor = DayString(start)
    while cursor <= end:
        result.append(cursor)
        cursor = add_days(cursor, 1)
    return result


def overlaps(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    """True iff closed intervals [a_start, a_end] and [b_start, b_end] intersect."""
    return not (a_end < b_start or b_end < a_start)


def start_of_local_day(value: str) -> datetime:
    """Local midnight of `value` in the operating timezone, as an aware UTC datetime."""
    local_midnight = datetime.combine(_to_date(value), time(0), tzinfo=OPERATING_UTC_OFFSET)
    return local_midnight.astimezone(timezone.utc)


def in_window(
    now: datetime, target: datetime, window: timedelta = REMINDER_WINDOW,
) -> bool:
    """True iff 0 <= now - target < window."""
    delta = now - target
    return timedelta(0) <= delta < window
