# board_meetings/api/routes/meetings.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, Path, Response

from board_meetings.api.dependencies.scheduler import get_scheduler
from board_meetings.schemas.meeting import (
    ActorAction,
    ApproveRequest,
    CancelRequest,
    ConfirmationDisplay,
    MeetingCreate,
    MeetingCreationResult,
    MeetingRead,
    RejectRequest,
    RescheduleRequest,
    SetupUpdateRequest,
    SubmitRequest,
)
from board_meetings.schemas.meeting_event import ActivityEventCreate, MeetingEventRead
from board_meetings.schemas.participant import QuorumSummary
from board_meetings.services.scheduler import MeetingScheduler

router = APIRouter(prefix="/meetings", tags=["Meetings"])

_ERRORS = {
    403: {"description": "The acting user may not perform this action."},
    404: {"description": "Meeting, board or user not found."},
    409: {
        "description": (
            "Action not allowed in the meeting's current state, or the meeting was "
            "modified concurrently."
        ),
        "content": {
            "application/json": {
                "example": {
                    "detail": "Cannot approve a meeting in state 'draft.incomplete'.",
                    "error": "InvalidTransitionError",
                    "current_state": "draft.incomplete",
                    "requested": "approve",
                }
            }
        },
    },
    422: {"description": "Invalid input, e.g. an empty mandatory reason."},
}


@router.post(
    "",
    response_model=MeetingCreationResult,
    status_code=HTTPStatus.CREATED,
    summary="Create a meeting or a recurring series",
    description=(
        "Create a single meeting, or with `recurrence` one meeting per generated "
        "occurrence sharing a `series_id`.\n\n"
        "Behaviour:\n"
        "- Each meeting starts as `draft.incomplete` or `draft.complete` depending on "
        "its setup.\n"
        "- With `auto_submit` (default) a complete meeting is submitted right away: "
        "to `scheduled.pending_approval`, or straight to `scheduled.approved` when no "
        "confirmation is required.\n"
        "- Series occurrences are created independently. If some fail, the response is "
        "**207 Multi-Status** and failed dates can be retried by sending the same "
        "request with `series_id` and `occurrence_dates`."
    ),
    responses={
        201: {"description": "Every requested meeting was created."},
        207: {"description": "Series partially created; see `occurrences` for failures."},
        **_ERRORS,
    },
)
async def create_meeting(
    payload: MeetingCreate,
    response: Response,
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingCreationResult:
    result = await scheduler.create_meeting(payload)
    if result.failed:
        response.status_code = HTTPStatus.MULTI_STATUS
    return result


@router.get(
    "/series/{series_id}",
    response_model=list[MeetingRead],
    summary="List the meetings of a recurring series",
)
async def list_series(
    series_id: str = Path(..., description="Identifier shared by the series' meetings."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> list[MeetingRead]:
    return await scheduler.list_series(series_id)


@router.get(
    "/{meeting_id}",
    response_model=MeetingRead,
    summary="Get a meeting",
    responses={404: _ERRORS[404]},
)
async def get_meeting(
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingRead:
    return await scheduler.get_meeting(meeting_id)


# --------------------------------------------------------------------------
# Lifecycle actions
# --------------------------------------------------------------------------

@router.post(
    "/{meeting_id}/submit",
    response_model=MeetingRead,
    summary="Submit a complete draft for approval",
    description=(
        "Moves `draft.complete` to `scheduled.pending_approval`, or to "
        "`scheduled.approved` (system approval) when the meeting needs no confirmation."
    ),
    responses=_ERRORS,
)
async def submit_meeting(
    payload: SubmitRequest,
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingRead:
    return await scheduler.submit(meeting_id, payload.actor_id, notes=payload.notes)


@router.post(
    "/{meeting_id}/approve",
    response_model=MeetingRead,
    summary="Approve a meeting pending approval",
    description=(
        "Only a holder of the board's approver role may approve. System "
        "administrators never can."
    ),
    responses=_ERRORS,
)
async def approve_meeting(
    payload: ApproveRequest,
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingRead:
    return await scheduler.approve(meeting_id, payload.approver_id, payload.signature_id)


@router.post(
    "/{meeting_id}/reject",
    response_model=MeetingRead,
    summary="Reject a meeting pending approval",
    responses=_ERRORS,
)
async def reject_meeting(
    payload: RejectRequest,
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingRead:
    return await scheduler.reject(
        meeting_id, payload.approver_id, payload.reason, comments=payload.comments
    )


@router.post(
    "/{meeting_id}/resubmit",
    response_model=MeetingRead,
    summary="Resubmit a rejected meeting",
    responses=_ERRORS,
)
async def resubmit_meeting(
    payload: SubmitRequest,
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingRead:
    return await scheduler.resubmit(meeting_id, payload.actor_id, notes=payload.notes)


@router.post(
    "/{meeting_id}/start",
    response_model=MeetingRead,
    summary="Start an approved meeting",
    description="Allowed from `scheduled.approved` at or after the scheduled start time.",
    responses=_ERRORS,
)
async def start_meeting(
    payload: ActorAction,
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingRead:
    return await scheduler.start(meeting_id, payload.actor_id)


@router.post(
    "/{meeting_id}/end",
    response_model=MeetingRead,
    summary="End a meeting in progress",
    responses=_ERRORS,
)
async def end_meeting(
    payload: ActorAction,
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingRead:
    return await scheduler.end(meeting_id, payload.actor_id)


@router.post(
    "/{meeting_id}/archive",
    response_model=MeetingRead,
    summary="Archive a recently completed meeting",
    responses=_ERRORS,
)
async def archive_meeting(
    payload: ActorAction,
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingRead:
    return await scheduler.archive(meeting_id, payload.actor_id)


@router.post(
    "/{meeting_id}/cancel",
    response_model=MeetingRead,
    summary="Cancel a draft or scheduled meeting",
    responses=_ERRORS,
)
async def cancel_meeting(
    payload: CancelRequest,
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingRead:
    return await scheduler.cancel(meeting_id, payload.actor_id, payload.reason)


@router.post(
    "/{meeting_id}/reschedule",
    response_model=MeetingRead,
    summary="Move a meeting to a new date or time",
    description=(
        "An approved meeting that requires confirmation returns to "
        "`scheduled.pending_approval`."
    ),
    responses=_ERRORS,
)
async def reschedule_meeting(
    payload: RescheduleRequest,
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingRead:
    return await scheduler.reschedule(
        meeting_id,
        payload.actor_id,
        payload.scheduled_date,
        payload.start_time,
        duration_minutes=payload.duration_minutes,
    )


@router.post(
    "/{meeting_id}/setup",
    response_model=MeetingRead,
    summary="Update the setup facts of a draft",
    responses=_ERRORS,
)
async def update_setup(
    payload: SetupUpdateRequest,
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingRead:
    return await scheduler.update_setup(meeting_id, payload.actor_id, payload.setup)


# --------------------------------------------------------------------------
# Audit trail, quorum and confirmation
# --------------------------------------------------------------------------

@router.get(
    "/{meeting_id}/events",
    response_model=list[MeetingEventRead],
    summary="Get the audit trail of a meeting",
    description="Events in chronological order (ascending `sequence`).",
    responses={404: _ERRORS[404]},
)
async def list_events(
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> list[MeetingEventRead]:
    return await scheduler.get_events(meeting_id)


@router.post(
    "/{meeting_id}/events",
    response_model=MeetingEventRead,
    status_code=HTTPStatus.CREATED,
    summary="Record a non-status event",
    description=(
        "Adds attendance, vote, presentation, minutes or follow-up events to the "
        "audit trail. Lifecycle event types are rejected with 422."
    ),
    responses={404: _ERRORS[404], 422: _ERRORS[422]},
)
async def record_event(
    payload: ActivityEventCreate,
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> MeetingEventRead:
    return await scheduler.record_event(meeting_id, payload.actor_id, payload.payload)


@router.get(
    "/{meeting_id}/quorum",
    response_model=QuorumSummary,
    summary="Quorum figures from the board's live roster",
    responses={404: _ERRORS[404]},
)
async def get_quorum(
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> QuorumSummary:
    return await scheduler.get_quorum(meeting_id)


@router.get(
    "/{meeting_id}/confirmation",
    response_model=ConfirmationDisplay,
    summary="Confirmation status of a meeting",
    responses={404: _ERRORS[404]},
)
async def get_confirmation(
    meeting_id: str = Path(..., description="Identifier of the meeting."),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> ConfirmationDisplay:
    return await scheduler.get_confirmation(meeting_id)
