# tests/test_lifecycle.py
from datetime import datetime, timedelta, timezone

import pytest

from board_meetings.core.exceptions import InvalidTransitionError, ValidationError
from board_meetings.schemas.lifecycle import (
    APPROVED,
    CANCELLED,
    COMPLETED_ARCHIVED,
    COMPLETED_RECENT,
    DRAFT_COMPLETE,
    DRAFT_INCOMPLETE,
    IN_PROGRESS,
    PENDING_APPROVAL,
    REJECTED,
    parse_state,
)
from board_meetings.schemas.meeting_event import MeetingEventType
from board_meetings.services.lifecycle import LifecycleStateMachine as LSM

ALL_STATES = [
    DRAFT_INCOMPLETE,
    DRAFT_COMPLETE,
    PENDING_APPROVAL,
    APPROVED,
    REJECTED,
    IN_PROGRESS,
    COMPLETED_RECENT,
    COMPLETED_ARCHIVED,
    CANCELLED,
]

START = datetime(2026, 3, 10, 7, 0, tzinfo=timezone.utc)


def test_initial_state_depends_on_setup():
    assert LSM.initial_state(False).to_state == DRAFT_INCOMPLETE
    assert LSM.initial_state(True).to_state == DRAFT_COMPLETE
    assert LSM.initial_state(True).event_type == MeetingEventType.MEETING_CREATED


def test_complete_setup_moves_between_draft_sub_states():
    forward = LSM.complete_setup(DRAFT_INCOMPLETE, True)
    assert forward.to_state == DRAFT_COMPLETE
    assert forward.event_type == MeetingEventType.CONFIGURATION_COMPLETE

    backward = LSM.complete_setup(DRAFT_COMPLETE, False)
    assert backward.to_state == DRAFT_INCOMPLETE

    assert LSM.complete_setup(DRAFT_COMPLETE, True) is None


def test_submit_routes_on_confirmation_requirement():
    pending = LSM.submit(DRAFT_COMPLETE, requires_confirmation=True)
    assert pending.to_state == PENDING_APPROVAL
    assert pending.event_type == MeetingEventType.SUBMITTED_FOR_APPROVAL

    auto = LSM.submit(DRAFT_COMPLETE, requires_confirmation=False)
    assert auto.to_state == APPROVED
    assert auto.event_type == MeetingEventType.APPROVED


def test_submit_incomplete_draft_is_invalid():
    with pytest.raises(InvalidTransitionError) as exc_info:
        LSM.submit(DRAFT_INCOMPLETE, requires_confirmation=True)
    assert exc_info.value.current == "draft.incomplete"
    assert exc_info.value.requested == "submit"


def test_approval_cycle():
    assert LSM.approve(PENDING_APPROVAL).to_state == APPROVED
    assert LSM.reject(PENDING_APPROVAL, "incomplete_information").to_state == REJECTED
    assert LSM.resubmit(REJECTED).to_state == PENDING_APPROVAL


@pytest.mark.parametrize("reason", [None, "", "  "])
def test_reject_requires_reason(reason):
    with pytest.raises(ValidationError):
        LSM.reject(PENDING_APPROVAL, reason)


@pytest.mark.parametrize("state", [s for s in ALL_STATES if s != APPROVED])
def test_start_only_from_approved(state):
    with pytest.raises(InvalidTransitionError):
        LSM.start(state, START, START)


def test_start_respects_scheduled_time():
    with pytest.raises(InvalidTransitionError):
        LSM.start(APPROVED, START - timedelta(minutes=1), START)

    assert LSM.start(APPROVED, START, START).to_state == IN_PROGRESS


def test_start_time_guard_can_be_relaxed():
    early = LSM.start(APPROVED, START - timedelta(hours=3), START, enforce_start_time=False)
    assert early.to_state == IN_PROGRESS


def test_end_and_archive():
    assert LSM.end(IN_PROGRESS).to_state == COMPLETED_RECENT
    assert LSM.archive(COMPLETED_RECENT).to_state == COMPLETED_ARCHIVED

    with pytest.raises(InvalidTransitionError):
        LSM.archive(COMPLETED_ARCHIVED)
    with pytest.raises(InvalidTransitionError):
        LSM.end(APPROVED)


@pytest.mark.parametrize(
    "state",
    [DRAFT_INCOMPLETE, DRAFT_COMPLETE, PENDING_APPROVAL, APPROVED, REJECTED],
)
def test_cancel_from_draft_or_scheduled(state):
    transition = LSM.cancel(state, "Chairman unavailable")
    assert transition.to_state == CANCELLED
    assert transition.event_type == MeetingEventType.MEETING_CANCELLED


@pytest.mark.parametrize("state", [IN_PROGRESS, COMPLETED_RECENT, COMPLETED_ARCHIVED, CANCELLED])
def test_cancel_from_other_states_is_invalid(state):
    with pytest.raises(InvalidTransitionError):
        LSM.cancel(state, "too late")


def test_cancel_requires_reason():
    with pytest.raises(ValidationError):
        LSM.cancel(DRAFT_COMPLETE, "")


def test_reschedule_approved_meeting_needs_reconfirmation():
    transition = LSM.reschedule(APPROVED, requires_confirmation=True)
    assert transition.to_state == PENDING_APPROVAL
    assert transition.changes_state is True

    kept = LSM.reschedule(APPROVED, requires_confirmation=False)
    assert kept.to_state == APPROVED
    assert kept.changes_state is False

    assert LSM.reschedule(REJECTED, requires_confirmation=True).to_state == REJECTED

    with pytest.raises(InvalidTransitionError):
        LSM.reschedule(IN_PROGRESS, requires_confirmation=True)


@pytest.mark.parametrize(
    "status, sub_status",
    [
        ("draft", None),
        ("draft", "approved"),
        ("scheduled", "recent"),
        ("in_progress", "approved"),
        ("cancelled", "incomplete"),
        ("completed", None),
        ("paused", None),
    ],
)
def test_illegal_stored_state_is_reported(status, sub_status):
    with pytest.raises(ValueError):
        parse_state(status, sub_status)
    with pytest.raises(InvalidTransitionError):
        LSM.load(status, sub_status)


@pytest.mark.parametrize("state", ALL_STATES)
def test_every_legal_state_round_trips_through_columns(state):
    assert parse_state(state.status, state.sub_status) == state
