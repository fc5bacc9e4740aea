# tests/test_event_log.py
from datetime import datetime, timedelta, timezone

import pytest

from board_meetings.schemas.lifecycle import APPROVED, DRAFT_COMPLETE, PENDING_APPROVAL, parse_state
from board_meetings.schemas.meeting_event import (
    AgendaPublishedPayload,
    ApprovedPayload,
    MeetingEventType,
)
from board_meetings.schemas.participant import Actor
from board_meetings.services.event_log import EventLog
from board_meetings.services.lifecycle import Transition

NOW = datetime(2026, 3, 1, 6, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_sequences_are_contiguous_per_meeting(scheduler, db_session, build_request):
    """
    Each meeting has its own 1-based sequence, whatever else is in the log.
    """
    first = (await scheduler.create_meeting(build_request())).meetings[0]
    second = (await scheduler.create_meeting(build_request(title="Other"))).meetings[0]

    await scheduler.record_event(first.id, "17", AgendaPublishedPayload(item_count=4))

    first_events = await EventLog(db_session).list_for_meeting(first.id)
    second_events = await EventLog(db_session).list_for_meeting(second.id)

    assert [e.sequence for e in first_events] == [1, 2, 3]
    assert [e.sequence for e in second_events] == [1, 2]
    assert [e.event_type for e in first_events] == [
        MeetingEventType.MEETING_CREATED,
        MeetingEventType.SUBMITTED_FOR_APPROVAL,
        MeetingEventType.AGENDA_PUBLISHED,
    ]


@pytest.mark.asyncio
async def test_activity_events_carry_no_state_change(scheduler, build_request):
    meeting = (await scheduler.create_meeting(build_request())).meetings[0]

    event = await scheduler.record_event(meeting.id, "42", AgendaPublishedPayload(item_count=4))

    assert event.to_status is None
    assert event.from_status is None
    assert event.performed_by == "42"
    assert event.performed_by_name == "Board Member"
    assert isinstance(event.payload, AgendaPublishedPayload)
    assert event.payload.item_count == 4


@pytest.mark.asyncio
async def test_project_state_matches_materialized_state(scheduler, clock, build_request):
    meeting = (await scheduler.create_meeting(build_request())).meetings[0]
    await scheduler.approve(meeting.id, "5")
    await scheduler.reschedule(meeting.id, "17", meeting.scheduled_date + timedelta(days=1), meeting.start_time)
    await scheduler.approve(meeting.id, "5")

    clock.advance(timedelta(days=10, hours=1))
    await scheduler.start(meeting.id, "3")
    clock.advance(timedelta(hours=2))
    stored = await scheduler.end(meeting.id, "3")

    events = await scheduler.get_events(meeting.id)
    projected = EventLog.project_state(events)

    assert projected == parse_state(stored.status, stored.sub_status)
    assert (stored.status, stored.sub_status) == ("completed", "recent")


@pytest.mark.asyncio
async def test_append_rejects_payload_that_does_not_match_transition(scheduler, db_session, build_request):
    meeting = (await scheduler.create_meeting(build_request())).meetings[0]
    log = EventLog(db_session)
    actor = Actor(user_id="5", full_name="Peter Otieno", roles=["group_company_secretary"])

    with pytest.raises(ValueError):
        await log.append(
            meeting_id=meeting.id,
            payload=AgendaPublishedPayload(item_count=1),
            actor=actor,
            performed_at=NOW,
            transition=Transition(PENDING_APPROVAL, APPROVED, MeetingEventType.APPROVED),
        )
    await db_session.rollback()

    # A matching payload is accepted and records both ends of the transition
    event = await log.append(
        meeting_id=meeting.id,
        payload=ApprovedPayload(approver_role="group_company_secretary"),
        actor=actor,
        performed_at=NOW,
        transition=Transition(PENDING_APPROVAL, APPROVED, MeetingEventType.APPROVED),
    )
    assert (event.from_status, event.from_sub_status) == ("scheduled", "pending_approval")
    assert (event.to_status, event.to_sub_status) == ("scheduled", "approved")
    await db_session.rollback()


def test_project_state_of_empty_log_is_none():
    assert EventLog.project_state([]) is None


@pytest.mark.asyncio
async def test_creation_event_records_initial_state(scheduler, build_request):
    request = build_request(auto_submit=False)
    meeting = (await scheduler.create_meeting(request)).meetings[0]

    events = await scheduler.get_events(meeting.id)

    assert len(events) == 1
    created = events[0]
    assert created.event_type == MeetingEventType.MEETING_CREATED
    assert created.from_status is None
    assert parse_state(created.to_status, created.to_sub_status) == DRAFT_COMPLETE
    assert created.payload.requires_confirmation is True
    assert created.payload.missing_requirements == []
