# board_meetings/schemas/meeting_event.py
from __future__ import annotations

from datetime import date as date_type, datetime, time
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from board_meetings.schemas.requirements import MeetingOverrides


class MeetingEventType(str, Enum):
    """
    Every kind of entry the audit trail can hold, grouped by meeting phase.
    """

    # Pre-meeting
    MEETING_CREATED = "meeting_created"
    CONFIGURATION_COMPLETE = "configuration_complete"
    SUBMITTED_FOR_APPROVAL = "submitted_for_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    RESUBMITTED = "resubmitted"
    SCHEDULED = "scheduled"
    RESCHEDULED = "rescheduled"
    PARTICIPANT_ADDED = "participant_added"
    PARTICIPANT_REMOVED = "participant_removed"
    AGENDA_PUBLISHED = "agenda_published"
    DOCUMENTS_UPLOADED = "documents_uploaded"
    REMINDER_SENT = "reminder_sent"

    # During meeting
    MEETING_STARTED = "meeting_started"
    PARTICIPANT_JOINED = "participant_joined"
    PARTICIPANT_LEFT = "participant_left"
    QUORUM_ACHIEVED = "quorum_achieved"
    QUORUM_LOST = "quorum_lost"
    VOTE_STARTED = "vote_started"
    VOTE_CLOSED = "vote_closed"
    PRESENTATION_STARTED = "presentation_started"
    PRESENTATION_ENDED = "presentation_ended"
    MEETING_ENDED = "meeting_ended"

    # Post meeting
    MINUTES_CREATED = "minutes_created"
    MINUTES_APPROVED = "minutes_approved"
    ACTION_ITEM_CREATED = "action_item_created"
    ACTION_ITEM_COMPLETED = "action_item_completed"
    RESOLUTION_PASSED = "resolution_passed"
    FOLLOW_UP_SCHEDULED = "follow_up_scheduled"
    ARCHIVED = "archived"
    MEETING_CANCELLED = "meeting_cancelled"


# Event types that may only be produced by the lifecycle state machine.
LIFECYCLE_EVENT_TYPES = frozenset(
    {
        MeetingEventType.MEETING_CREATED,
        MeetingEventType.CONFIGURATION_COMPLETE,
        MeetingEventType.SUBMITTED_FOR_APPROVAL,
        MeetingEventType.APPROVED,
        MeetingEventType.REJECTED,
        MeetingEventType.RESUBMITTED,
        MeetingEventType.SCHEDULED,
        MeetingEventType.RESCHEDULED,
        MeetingEventType.MEETING_STARTED,
        MeetingEventType.MEETING_ENDED,
        MeetingEventType.ARCHIVED,
        MeetingEventType.MEETING_CANCELLED,
    }
)

APPROVAL_EVENT_TYPES = frozenset(
    {
        MeetingEventType.SUBMITTED_FOR_APPROVAL,
        MeetingEventType.APPROVED,
        MeetingEventType.REJECTED,
        MeetingEventType.RESUBMITTED,
    }
)


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)


# --------------------------------------------------------------------------
# Lifecycle payloads
# --------------------------------------------------------------------------

class MeetingCreatedPayload(_Payload):
    event_type: Literal["meeting_created"] = "meeting_created"
    board_id: str
    meeting_type: str
    title: str
    requires_confirmation: bool
    series_id: str | None = None
    series_position: int | None = None
    overrides: MeetingOverrides | None = None
    override_reason: str | None = None
    missing_requirements: list[str] = Field(default_factory=list)


class ConfigurationCompletePayload(_Payload):
    event_type: Literal["configuration_complete"] = "configuration_complete"
    complete: bool = True
    missing_requirements: list[str] = Field(default_factory=list)
    waived_requirements: list[str] = Field(default_factory=list)


class SubmittedForApprovalPayload(_Payload):
    event_type: Literal["submitted_for_approval"] = "submitted_for_approval"
    approver_role: str
    notes: str | None = None


class ApprovedPayload(_Payload):
    event_type: Literal["approved"] = "approved"
    approver_role: str | None = None
    signature_id: str | None = None
    system_approved: bool = False
    skip_approval_override: bool = False
    override_reason: str | None = None


class RejectedPayload(_Payload):
    event_type: Literal["rejected"] = "rejected"
    rejection_reason: str
    comments: str | None = None


class ResubmittedPayload(_Payload):
    event_type: Literal["resubmitted"] = "resubmitted"
    requires_confirmation: bool
    notes: str | None = None


class SchedulePayload(_Payload):
    event_type: Literal["scheduled", "rescheduled"]
    previous_date: date_type | None = None
    previous_start_time: time | None = None
    scheduled_date: date_type
    start_time: time
    duration_minutes: int
    reconfirmation_required: bool = False


class MeetingStartedPayload(_Payload):
    event_type: Literal["meeting_started"] = "meeting_started"
    quorum_required: int
    started_early: bool = False


class MeetingEndedPayload(_Payload):
    event_type: Literal["meeting_ended"] = "meeting_ended"
    duration_minutes: float | None = None


class ArchivedPayload(_Payload):
    event_type: Literal["archived"] = "archived"
    retention_days: int | None = None
    automatic: bool = False


class CancelledPayload(_Payload):
    event_type: Literal["meeting_cancelled"] = "meeting_cancelled"
    reason: str


# --------------------------------------------------------------------------
# Activity payloads (recorded by collaborators, never change status)
# --------------------------------------------------------------------------

class ParticipantPayload(_Payload):
    event_type: Literal[
        "participant_added", "participant_removed", "participant_joined", "participant_left"
    ]
    user_id: str
    is_guest: bool = False


class AgendaPublishedPayload(_Payload):
    event_type: Literal["agenda_published"] = "agenda_published"
    item_count: int = Field(..., ge=0)


class DocumentsUploadedPayload(_Payload):
    event_type: Literal["documents_uploaded"] = "documents_uploaded"
    document_ids: list[str] = Field(..., min_length=1)


class ReminderSentPayload(_Payload):
    event_type: Literal["reminder_sent"] = "reminder_sent"
    channel: str = "email"
    recipient_count: int = Field(..., ge=0)


class QuorumPayload(_Payload):
    event_type: Literal["quorum_achieved", "quorum_lost"]
    present_count: int = Field(..., ge=0)
    required_count: int = Field(..., ge=0)


class VotePayload(_Payload):
    event_type: Literal["vote_started", "vote_closed"]
    vote_id: str
    outcome: str | None = None


class PresentationPayload(_Payload):
    event_type: Literal["presentation_started", "presentation_ended"]
    presenter_id: str
    topic: str | None = None


class MinutesPayload(_Payload):
    event_type: Literal["minutes_created", "minutes_approved"]
    minutes_id: str


class ActionItemPayload(_Payload):
    event_type: Literal["action_item_created", "action_item_completed"]
    action_item_id: str
    assignee_id: str | None = None


class ResolutionPassedPayload(_Payload):
    event_type: Literal["resolution_passed"] = "resolution_passed"
    resolution_id: str


class FollowUpScheduledPayload(_Payload):
    event_type: Literal["follow_up_scheduled"] = "follow_up_scheduled"
    follow_up_meeting_id: str


EventPayload = Annotated[
    Union[
        MeetingCreatedPayload,
        ConfigurationCompletePayload,
        SubmittedForApprovalPayload,
        ApprovedPayload,
        RejectedPayload,
        ResubmittedPayload,
        SchedulePayload,
        MeetingStartedPayload,
        MeetingEndedPayload,
        ArchivedPayload,
        CancelledPayload,
        ParticipantPayload,
        AgendaPublishedPayload,
        DocumentsUploadedPayload,
        ReminderSentPayload,
        QuorumPayload,
        VotePayload,
        PresentationPayload,
        MinutesPayload,
        ActionItemPayload,
        ResolutionPassedPayload,
        FollowUpScheduledPayload,
    ],
    Field(discriminator="event_type"),
]

payload_adapter: TypeAdapter[EventPayload] = TypeAdapter(EventPayload)


class MeetingEventRead(BaseModel):
    """
    Public, immutable representation of an audit trail entry.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Identifier of the event.")
    meeting_id: str
    sequence: int = Field(..., description="1-based position in the meeting's event log.")
    event_type: MeetingEventType
    from_status: str | None = None
    from_sub_status: str | None = None
    to_status: str | None = None
    to_sub_status: str | None = None
    performed_by: str
    performed_by_name: str = Field(
        ...,
        description="Actor name as it was when the event happened.",
    )
    performed_at: datetime
    payload: EventPayload


class ActivityEventCreate(BaseModel):
    """
    Request body for recording a non-status event against a meeting.
    """

    actor_id: str = Field(..., examples=["17"])
    payload: EventPayload
