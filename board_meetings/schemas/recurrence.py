# board_meetings/schemas/recurrence.py
from datetime import date as date_type
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class RecurrenceFrequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class Weekday(str, Enum):
    """
    Day names, declared in Sunday-first order to match calendar week layout.
    """

    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"

    @property
    def python_weekday(self) -> int:
        """Index compatible with `date.weekday()` (Monday = 0)."""
        return (list(Weekday).index(self) - 1) % 7


class MonthlyRule(str, Enum):
    DAY_OF_MONTH = "day_of_month"
    DAY_OF_WEEK = "day_of_week"


class RecurrenceEndType(str, Enum):
    DATE = "date"
    OCCURRENCES = "occurrences"


class RecurrencePattern(BaseModel):
    """
    Rule set describing how a meeting series' dates derive from its start date.

    Frequency-specific fields
    -------------------------
    - weekly:    `weekdays`
    - monthly:   `monthly_rule` plus `day_of_month`, or `week_of_month` + `day_of_week`
    - quarterly: `quarterly_months` plus the monthly day rule
    - annually:  anniversary of the start date
    """

    frequency: RecurrenceFrequency = Field(..., examples=["monthly"])
    interval: int = Field(
        1,
        ge=1,
        description="Repeat every N weeks / months / years. Quarterly patterns require 1.",
    )

    weekdays: list[Weekday] = Field(default_factory=list, examples=[["monday", "thursday"]])

    monthly_rule: MonthlyRule = Field(MonthlyRule.DAY_OF_MONTH)
    day_of_month: int | None = Field(None, ge=1, le=31, examples=[15])
    week_of_month: int | None = Field(
        None,
        description="1..5 for the nth matching weekday, -1 for the last one.",
        examples=[-1],
    )
    day_of_week: Weekday | None = Field(None, examples=["friday"])

    quarterly_months: list[int] = Field(default_factory=lambda: [1, 4, 7, 10])

    end_type: RecurrenceEndType = Field(RecurrenceEndType.OCCURRENCES)
    end_date: date_type | None = Field(
        None,
        description="Exclusive upper bound, used when end_type is 'date'.",
    )
    occurrence_count: int | None = Field(12, ge=1, examples=[12])

    exclude_dates: set[date_type] = Field(
        default_factory=set,
        description="Dates kept in the calendar but flagged as excluded (e.g. holidays).",
    )

    @field_validator("week_of_month")
    @classmethod
    def _check_week_of_month(cls, value: int | None) -> int | None:
        if value is not None and value not in (-1, 1, 2, 3, 4, 5):
            raise ValueError("week_of_month must be 1..5 or -1 (last)")
        return value

    @field_validator("quarterly_months")
    @classmethod
    def _check_quarterly_months(cls, value: list[int]) -> list[int]:
        for month in value:
            if month < 1 or month > 12:
                raise ValueError("quarterly_months entries must be between 1 and 12")
        return sorted(set(value))


class RecurrenceOccurrence(BaseModel):
    position: int = Field(..., description="1-based position in the generated calendar.")
    date: date_type
    excluded: bool = False


class RecurrenceResult(BaseModel):
    """
    Output of the recurrence engine and of the preview endpoint.
    """

    occurrences: list[RecurrenceOccurrence]
    truncated: bool = Field(
        False,
        description="True when the pattern would produce more dates than the hard cap.",
    )

    @property
    def scheduled_dates(self) -> list[date_type]:
        return [o.date for o in self.occurrences if not o.excluded]


class RecurrencePreviewRequest(BaseModel):
    start_date: date_type = Field(..., examples=["2026-01-05"])
    pattern: RecurrencePattern
