# board_meetings/services/recurrence.py
from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date, timedelta

from board_meetings.core.exceptions import RecurrenceBoundsError
from board_meetings.schemas.recurrence import (
    MonthlyRule,
    RecurrenceEndType,
    RecurrenceFrequency,
    RecurrenceOccurrence,
    RecurrencePattern,
    RecurrenceResult,
)
from board_meetings.services.date_math import (
    add_months,
    add_years,
    clamp_day,
    nth_weekday_of_month,
    start_of_week,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_OCCURRENCES = 52
DEFAULT_HORIZON_YEARS = 2


class RecurrenceEngine:
    """
    Expands a RecurrencePattern into the concrete dates of a meeting series.

    Rules
    -----
    - Only dates on/after `start_date` and strictly before the boundary are
      produced. The boundary is `end_date` for date-terminated patterns and
      `start_date + horizon_years` otherwise.
    - Excluded dates stay in the result, flagged `excluded=True`, and count
      towards the occurrence limit.
    - At most `max_occurrences` entries are returned; `truncated` reports
      whether the pattern had more to give.
    - Output is sorted ascending with no duplicates.

    The engine is pure: same input, same output, no I/O.
    """

    def __init__(
        self,
        max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
        horizon_years: int = DEFAULT_HORIZON_YEARS,
    ) -> None:
        if max_occurrences < 1:
            raise ValueError("max_occurrences must be >= 1")
        self.max_occurrences = max_occurrences
        self.horizon_years = horizon_years

    def generate(self, start_date: date, pattern: RecurrencePattern) -> RecurrenceResult:
        self._check_pattern(start_date, pattern)
        boundary = self._boundary(start_date, pattern)

        if pattern.end_type == RecurrenceEndType.OCCURRENCES and pattern.occurrence_count:
            wanted = pattern.occurrence_count
        else:
            wanted = None

        # Pull one extra date past the cap so truncation is observable.
        limit = self.max_occurrences + 1
        if wanted is not None:
            limit = min(wanted, limit)

        dates: list[date] = []
        for candidate in self._candidates(start_date, pattern, boundary):
            if len(dates) >= limit:
                break
            dates.append(candidate)

        truncated = len(dates) > self.max_occurrences
        dates = dates[: self.max_occurrences]

        if not dates:
            raise RecurrenceBoundsError(
                "Recurrence pattern produces no occurrences before its end boundary.",
                start_date=start_date.isoformat(),
                boundary=boundary.isoformat(),
            )

        if truncated:
            logger.info(
                "Recurrence from %s truncated at %d occurrences", start_date, self.max_occurrences
            )

        occurrences = [
            RecurrenceOccurrence(
                position=index,
                date=value,
                excluded=value in pattern.exclude_dates,
            )
            for index, value in enumerate(dates, start=1)
        ]
        return RecurrenceResult(occurrences=occurrences, truncated=truncated)

    # ------------------------------------------------------------------
    # Validation / bounds
    # ------------------------------------------------------------------

    @staticmethod
    def _check_pattern(start_date: date, pattern: RecurrencePattern) -> None:
        if pattern.frequency == RecurrenceFrequency.WEEKLY and not pattern.weekdays:
            raise RecurrenceBoundsError("Weekly recurrence requires at least one weekday.")

        if pattern.frequency == RecurrenceFrequency.QUARTERLY:
            if not pattern.quarterly_months:
                raise RecurrenceBoundsError("Quarterly recurrence requires at least one month.")
            if pattern.interval != 1:
                raise RecurrenceBoundsError("Quarterly recurrence does not support an interval.")

        if pattern.end_type == RecurrenceEndType.DATE:
            if pattern.end_date is None:
                raise RecurrenceBoundsError("end_date is required when end_type is 'date'.")
            if pattern.end_date <= start_date:
                raise RecurrenceBoundsError(
                    "end_date must be after the start date.",
                    start_date=start_date.isoformat(),
                    end_date=pattern.end_date.isoformat(),
                )

    def _boundary(self, start_date: date, pattern: RecurrencePattern) -> date:
        if pattern.end_type == RecurrenceEndType.DATE and pattern.end_date is not None:
            return pattern.end_date
        return add_years(start_date, self.horizon_years)

    # ------------------------------------------------------------------
    # Candidate generation (ascending, deduplicated, within bounds)
    # ------------------------------------------------------------------

    def _candidates(
        self, start_date: date, pattern: RecurrencePattern, boundary: date
    ) -> Iterator[date]:
        if pattern.frequency == RecurrenceFrequency.WEEKLY:
            raw = self._weekly(start_date, pattern, boundary)
        elif pattern.frequency == RecurrenceFrequency.MONTHLY:
            raw = self._monthly(start_date, pattern, boundary, months=None)
        elif pattern.frequency == RecurrenceFrequency.QUARTERLY:
            raw = self._monthly(start_date, pattern, boundary, months=set(pattern.quarterly_months))
        else:
            raw = self._annually(start_date, pattern, boundary)

        last: date | None = None
        for value in raw:
            if value < start_date or value >= boundary:
                continue
            if last is not None and value <= last:
                continue
            last = value
            yield value

    @staticmethod
    def _weekly(start_date: date, pattern: RecurrencePattern, boundary: date) -> Iterator[date]:
        offsets = sorted({(day.python_weekday + 1) % 7 for day in pattern.weekdays})
        week = start_of_week(start_date)
        while week < boundary:
            for offset in offsets:
                # Days of the first week that fall before start_date are
                # picked up again by the next generated week.
                yield week + timedelta(days=offset)
            week += timedelta(weeks=pattern.interval)

    @staticmethod
    def _month_date(
        year: int, month: int, start_date: date, pattern: RecurrencePattern
    ) -> date | None:
        if pattern.monthly_rule == MonthlyRule.DAY_OF_WEEK:
            weekday = (
                pattern.day_of_week.python_weekday
                if pattern.day_of_week is not None
                else start_date.weekday()
            )
            nth = pattern.week_of_month
            if nth is None:
                nth = (start_date.day - 1) // 7 + 1
            return nth_weekday_of_month(year, month, weekday, nth)

        day = pattern.day_of_month or start_date.day
        return clamp_day(year, month, day)

    def _monthly(
        self,
        start_date: date,
        pattern: RecurrencePattern,
        boundary: date,
        months: set[int] | None,
    ) -> Iterator[date]:
        step = 1 if months is not None else pattern.interval
        year, month = start_date.year, start_date.month
        while date(year, month, 1) < boundary:
            if months is None or month in months:
                value = self._month_date(year, month, start_date, pattern)
                # None: the month has no such nth weekday
                if value is not None:
                    yield value
            year, month = add_months(year, month, step)

    @staticmethod
    def _annually(start_date: date, pattern: RecurrencePattern, boundary: date) -> Iterator[date]:
        years = 0
        while True:
            value = add_years(start_date, years)
            if value >= boundary:
                return
            yield value
            years += pattern.interval
