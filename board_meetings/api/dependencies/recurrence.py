# board_meetings/api/dependencies/recurrence.py
from board_meetings.core.config import get_settings
from board_meetings.services.recurrence import RecurrenceEngine


def get_recurrence_engine() -> RecurrenceEngine:
    """
    Recurrence engine bounded by the configured cap and horizon.

    Previews are pure date math, so no database session is opened.
    """
    settings = get_settings()
    return RecurrenceEngine(
        max_occurrences=settings.RECURRENCE_MAX_OCCURRENCES,
        horizon_years=settings.RECURRENCE_HORIZON_YEARS,
    )
