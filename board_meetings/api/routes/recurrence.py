# board_meetings/api/routes/recurrence.py
from http import HTTPStatus

from fastapi import APIRouter, Depends

from board_meetings.api.dependencies.recurrence import get_recurrence_engine
from board_meetings.schemas.recurrence import RecurrencePreviewRequest, RecurrenceResult
from board_meetings.services.recurrence import RecurrenceEngine

router = APIRouter(prefix="/recurrence", tags=["Recurrence"])


@router.post(
    "/preview",
    response_model=RecurrenceResult,
    status_code=HTTPStatus.OK,
    summary="Preview the dates a recurrence pattern generates",
    description=(
        "Expands a pattern without creating anything.\n\n"
        "- Excluded dates are listed with `excluded: true`.\n"
        "- At most 52 occurrences are returned; `truncated` tells whether the "
        "pattern had more."
    ),
    responses={
        200: {
            "description": "Generated occurrences.",
            "content": {
                "application/json": {
                    "example": {
                        "occurrences": [
                            {"position": 1, "date": "2026-01-30", "excluded": False},
                            {"position": 2, "date": "2026-02-27", "excluded": True},
                        ],
                        "truncated": False,
                    }
                }
            },
        },
        422: {"description": "The pattern cannot produce any occurrence."},
    },
)
async def preview_recurrence(
    payload: RecurrencePreviewRequest,
    engine: RecurrenceEngine = Depends(get_recurrence_engine),
) -> RecurrenceResult:
    return engine.generate(payload.start_date, payload.pattern)
