# board_meetings/services/date_math.py
from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from board_meetings.core.exceptions import ValidationError


class Clock:
    """
    Source of "now" for the engine.

    Services never call `datetime.now()` directly so tests can pin time.
    """

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(tz=timezone.utc)


class FixedClock(Clock):
    """Clock frozen at a given instant; `advance` moves it forward."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware datetime")
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, delta: timedelta) -> None:
        self._instant = self._instant + delta


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Return `year-month-day`, clamping `day` to the length of the month."""
    return date(year, month, min(day, days_in_month(year, month)))


def add_months(year: int, month: int, months: int) -> tuple[int, int]:
    """Step a (year, month) pair by `months` (may be negative)."""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def add_years(value: date, years: int) -> date:
    """Same calendar day `years` later; Feb 29 becomes Feb 28 in common years."""
    return clamp_day(value.year + years, value.month, value.day)


def start_of_week(value: date) -> date:
    """Sunday on or before `value` (weeks run Sunday..Saturday)."""
    # date.weekday(): Monday=0 .. Sunday=6
    return value - timedelta(days=(value.weekday() + 1) % 7)


def nth_weekday_of_month(year: int, month: int, weekday: int, n: int) -> date | None:
    """
    Resolve "the n-th <weekday> of a month".

    Parameters
    ----------
    weekday:
        Python weekday index (Monday = 0).
    n:
        1..5 for the n-th occurrence, -1 for the last one.

    Returns
    -------
    date | None
        The resolved date, or None when the month has no such occurrence
        (e.g. a 5th Monday in a month with four).
    """
    if n == -1:
        last = date(year, month, days_in_month(year, month))
        return last - timedelta(days=(last.weekday() - weekday) % 7)

    first = date(year, month, 1)
    first_match = first + timedelta(days=(weekday - first.weekday()) % 7)
    candidate = first_match + timedelta(weeks=n - 1)
    if candidate.month != month:
        return None
    return candidate


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown timezone '{name}'.", timezone=name) from exc


def scheduled_start(scheduled_date: date, start_time: time, tz_name: str) -> datetime:
    """Timezone-aware instant at which a meeting is scheduled to begin."""
    return datetime.combine(scheduled_date, start_time, tzinfo=resolve_timezone(tz_name))


def end_time_for(start_time: time, duration_minutes: int) -> time:
    """Wall-clock end time; wraps past midnight for overnight sessions."""
    start = datetime.combine(date(2000, 1, 1), start_time)
    return (start + timedelta(minutes=duration_minutes)).time()
