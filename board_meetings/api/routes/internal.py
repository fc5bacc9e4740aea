# board_meetings/api/routes/internal.py
from datetime import datetime
from http import HTTPStatus

from fastapi import APIRouter, Depends, Query

from board_meetings.api.dependencies.internal_auth import verify_internal_api_key
from board_meetings.api.dependencies.scheduler import get_scheduler
from board_meetings.schemas.meeting import ArchiveRunResult
from board_meetings.services.scheduler import MeetingScheduler

router = APIRouter(
    prefix="/internal",
    tags=["Internal"],
    dependencies=[Depends(verify_internal_api_key)],
)


@router.post(
    "/run-archive",
    response_model=ArchiveRunResult,
    status_code=HTTPStatus.OK,
    summary="Archive completed meetings past their retention window",
    description=(
        "Moves every `completed.recent` meeting that ended more than "
        "`ARCHIVE_RETENTION_DAYS` ago to `completed.archived`, recording an "
        "automatic `archived` event for each.\n\n"
        "Intended to be called from a cron job or scheduler and protected via the "
        "`X-Internal-Api-Key` header when configured."
    ),
    responses={
        200: {
            "description": "Archive run finished. A summary is returned.",
            "content": {
                "application/json": {
                    "example": {
                        "cutoff": "2026-02-01T00:00:00Z",
                        "retention_days": 30,
                        "archived_ids": ["6f1c2d4e-0000-4000-8000-000000000001"],
                        "failed_ids": [],
                    }
                }
            },
        },
        401: {"description": "Missing or invalid internal API key (if configured)."},
    },
)
async def run_archive(
    as_of: datetime | None = Query(
        default=None,
        description="Reference instant for the retention window. Defaults to now.",
        examples=["2026-03-03T00:00:00Z"],
    ),
    scheduler: MeetingScheduler = Depends(get_scheduler),
) -> ArchiveRunResult:
    """
    Run the retention-driven archive job once.
    """
    return await scheduler.archive_due(now=as_of)
