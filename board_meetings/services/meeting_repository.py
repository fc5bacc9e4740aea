# board_meetings/services/meeting_repository.py
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from board_meetings.core.exceptions import NotFoundError
from board_meetings.models.meeting import Meeting
from board_meetings.schemas.lifecycle import CompletedSubStatus, MeetingStatus


class MeetingRepository:
    """
    Persistence port for meetings over an async SQLAlchemy session.

    Writes go through the session's unit of work; the `version` column is
    bumped by the mapper on every UPDATE, so a concurrent modification
    surfaces as `StaleDataError` at flush time.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def add(self, meeting: Meeting) -> None:
        self._session.add(meeting)

    async def get(self, meeting_id: str) -> Meeting:
        meeting = await self._session.get(Meeting, meeting_id)
        if meeting is None:
            raise NotFoundError(f"Meeting {meeting_id} not found.", meeting_id=meeting_id)
        return meeting

    async def list_series(self, series_id: str) -> Sequence[Meeting]:
        stmt = (
            select(Meeting)
            .where(Meeting.series_id == series_id)
            .order_by(Meeting.series_position.asc(), Meeting.scheduled_date.asc())
        )
        return (await self._session.execute(stmt)).scalars().all()

    async def list_due_for_archive(self, ended_before: datetime) -> Sequence[str]:
        """Ids of `completed.recent` meetings that ended before `ended_before`."""
        stmt = (
            select(Meeting.id)
            .where(
                Meeting.status == MeetingStatus.COMPLETED.value,
                Meeting.sub_status == CompletedSubStatus.RECENT.value,
                Meeting.ended_at.is_not(None),
                Meeting.ended_at < ended_before,
            )
            .order_by(Meeting.ended_at.asc())
        )
        return (await self._session.execute(stmt)).scalars().all()
