# board_meetings/services/event_log.py
from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from board_meetings.models.meeting_event import MeetingEvent
from board_meetings.schemas.lifecycle import LifecycleState, parse_state
from board_meetings.schemas.meeting_event import EventPayload, MeetingEventRead, MeetingEventType
from board_meetings.schemas.participant import Actor
from board_meetings.services.lifecycle import Transition

logger = logging.getLogger(__name__)


class EventLog:
    """
    Append-only audit trail of meeting events.

    Responsibilities
    ----------------
    - Add events inside the caller's transaction, numbering them with the
      next per-meeting `sequence`.
    - Serialize typed payloads to JSON (the only place this happens).
    - Read a meeting's events back in chronological order.
    - Rebuild a meeting's lifecycle state from its status-changing events.

    Notes
    -----
    - `append` only flushes; committing (or rolling back) belongs to the
      caller so the event and the meeting update land together.
    - Events are never updated or deleted. Corrections are new events.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _next_sequence(self, meeting_id: str) -> int:
        stmt = select(func.max(MeetingEvent.sequence)).where(MeetingEvent.meeting_id == meeting_id)
        current = (await self._session.execute(stmt)).scalar_one_or_none()
        return (current or 0) + 1

    async def append(
        self,
        meeting_id: str,
        payload: EventPayload,
        actor: Actor,
        performed_at: datetime,
        transition: Transition | None = None,
    ) -> MeetingEvent:
        """
        Record one event for `meeting_id`.

        Parameters
        ----------
        payload:
            Typed payload; its `event_type` is the event's type.
        actor:
            Who performed the action. The name is snapshotted on the row.
        transition:
            For status-changing events, the from/to states to record.
        """
        event_type = MeetingEventType(payload.event_type)
        if transition is not None and transition.event_type != event_type:
            raise ValueError(
                f"Payload type '{event_type.value}' does not match transition event "
                f"'{transition.event_type.value}'"
            )

        from_state = transition.from_state if transition else None
        to_state = transition.to_state if transition else None

        event = MeetingEvent(
            id=str(uuid.uuid4()),
            meeting_id=meeting_id,
            sequence=await self._next_sequence(meeting_id),
            event_type=event_type.value,
            from_status=from_state.status if from_state else None,
            from_sub_status=from_state.sub_status if from_state else None,
            to_status=to_state.status if to_state else None,
            to_sub_status=to_state.sub_status if to_state else None,
            performed_by=actor.user_id,
            performed_by_name=actor.full_name,
            performed_at=performed_at,
            payload=payload.model_dump(mode="json"),
        )
        self._session.add(event)
        await self._session.flush()

        logger.debug(
            "Appended %s #%d for meeting %s by %s",
            event.event_type,
            event.sequence,
            meeting_id,
            actor.user_id,
        )
        return event

    async def list_for_meeting(self, meeting_id: str) -> list[MeetingEventRead]:
        stmt = (
            select(MeetingEvent)
            .where(MeetingEvent.meeting_id == meeting_id)
            .order_by(MeetingEvent.sequence.asc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [MeetingEventRead.model_validate(row) for row in rows]

    @staticmethod
    def project_state(events: Sequence[MeetingEventRead]) -> LifecycleState | None:
        """
        Replay status-changing events to rebuild the lifecycle state.

        Returns None for an empty log.
        """
        state: LifecycleState | None = None
        for event in events:
            if event.to_status is None:
                continue
            state = parse_state(event.to_status, event.to_sub_status)
        return state
