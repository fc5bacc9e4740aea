# board_meetings/schemas/meeting.py
from __future__ import annotations

from datetime import date as date_type, datetime, time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from board_meetings.schemas.recurrence import RecurrencePattern
from board_meetings.schemas.requirements import MeetingOverrides, MeetingSetup


class MeetingType(str, Enum):
    REGULAR = "regular"
    SPECIAL = "special"
    EMERGENCY = "emergency"
    AGM = "agm"
    COMMITTEE = "committee"


class LocationType(str, Enum):
    PHYSICAL = "physical"
    VIRTUAL = "virtual"
    HYBRID = "hybrid"


# --------------------------------------------------------------------------
# Create schema (POST /meetings)
# --------------------------------------------------------------------------

class MeetingSchedule(BaseModel):
    """
    When a meeting (or the first meeting of a series) takes place.
    """

    scheduled_date: date_type = Field(..., examples=["2026-03-02"])
    start_time: time = Field(..., examples=["09:00:00"])
    duration_minutes: int = Field(..., ge=1, le=24 * 60, examples=[120])
    timezone: str | None = Field(
        None,
        description="IANA timezone name. Defaults to the service DEFAULT_TIMEZONE.",
        examples=["Africa/Nairobi"],
    )


class MeetingCreate(BaseModel):
    """
    Request to create a single meeting or a recurring series.
    """

    board_id: str = Field(..., examples=["ktda-ms"])
    title: str = Field(..., min_length=1, max_length=200, examples=["Q1 Board Meeting"])
    meeting_type: MeetingType = Field(..., examples=["regular"])
    location_type: LocationType = Field(..., examples=["hybrid"])
    schedule: MeetingSchedule
    quorum_percentage: float = Field(50, ge=0, le=100, examples=[50])
    recurrence: RecurrencePattern | None = None
    overrides: MeetingOverrides | None = None
    override_reason: str | None = Field(
        None,
        description="Mandatory justification whenever an override is set.",
    )
    setup: MeetingSetup = Field(default_factory=MeetingSetup)
    created_by: str = Field(..., description="User creating the meeting.", examples=["17"])
    auto_submit: bool = Field(
        True,
        description=(
            "Submit each meeting for approval right away when its setup is already "
            "complete."
        ),
    )
    series_id: str | None = Field(
        None,
        description="Existing series to add occurrences to (used to retry failed ones).",
    )
    occurrence_dates: list[date_type] | None = Field(
        None,
        description="Restrict creation to these generated dates (used to retry failed ones).",
    )


# --------------------------------------------------------------------------
# Read schema
# --------------------------------------------------------------------------

class MeetingRead(BaseModel):
    """
    Response schema for a meeting, including its materialized lifecycle state.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    board_id: str
    title: str
    meeting_type: MeetingType
    location_type: LocationType

    scheduled_date: date_type
    start_time: time
    end_time: time
    duration_minutes: int
    timezone: str

    status: str = Field(..., examples=["scheduled"])
    sub_status: str | None = Field(None, examples=["pending_approval"])

    quorum_percentage: float
    quorum_required: int
    requires_confirmation: bool
    overrides: MeetingOverrides | None = None
    override_reason: str | None = None

    agenda_item_count: int
    document_count: int
    has_chairman: bool
    has_secretary: bool

    series_id: str | None = None
    series_position: int | None = None

    created_by: str
    created_at: datetime
    updated_at: datetime
    status_updated_at: datetime | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None
    cancelled_by: str | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None

    version: int


class OccurrenceStatus(str, Enum):
    CREATED = "created"
    EXCLUDED = "excluded"
    FAILED = "failed"


class OccurrenceResult(BaseModel):
    """
    Per-occurrence outcome of a series creation request.
    """

    position: int
    scheduled_date: date_type
    status: OccurrenceStatus
    meeting: MeetingRead | None = None
    error: str | None = Field(None, description="Error type for failed occurrences.")
    detail: str | None = None


class MeetingCreationResult(BaseModel):
    series_id: str | None = None
    meetings: list[MeetingRead] = Field(
        ...,
        description="Meetings created by this request, in date order.",
    )
    occurrences: list[OccurrenceResult] = Field(default_factory=list)
    truncated: bool = False

    @property
    def failed(self) -> list[OccurrenceResult]:
        return [o for o in self.occurrences if o.status == OccurrenceStatus.FAILED]


# --------------------------------------------------------------------------
# Lifecycle action bodies
# --------------------------------------------------------------------------

class ActorAction(BaseModel):
    actor_id: str = Field(..., examples=["17"])


class SubmitRequest(ActorAction):
    notes: str | None = None


class ApproveRequest(BaseModel):
    approver_id: str = Field(..., examples=["5"])
    signature_id: str | None = None


class RejectRequest(BaseModel):
    approver_id: str = Field(..., examples=["5"])
    reason: str = Field(..., examples=["incomplete_information"])
    comments: str | None = None


class CancelRequest(ActorAction):
    reason: str = Field(..., examples=["Chairman unavailable"])


class RescheduleRequest(ActorAction):
    scheduled_date: date_type
    start_time: time
    duration_minutes: int | None = Field(None, ge=1, le=24 * 60)


class SetupUpdateRequest(ActorAction):
    setup: MeetingSetup


class ConfirmationDisplay(BaseModel):
    """
    Approval status of a meeting as shown on its confirmation panel.
    """

    status: str = Field(..., examples=["approved"], description="none / pending / approved / rejected")
    requires_confirmation: bool
    approver_role: str
    prepared_by: str
    prepared_at: datetime
    decided_by: str | None = None
    decided_at: datetime | None = None
    rejection_reason: str | None = None
    comments: str | None = None
    system_approved: bool = False


class ArchiveRunResult(BaseModel):
    """
    Summary of one run of the retention-driven archive job.
    """

    cutoff: datetime = Field(..., description="Meetings that ended before this instant were due.")
    retention_days: int
    archived_ids: list[str] = Field(default_factory=list)
    failed_ids: list[str] = Field(default_factory=list)
