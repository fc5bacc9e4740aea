# board_meetings/api/routes/health.py
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from board_meetings.core.config import get_settings

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str = Field(..., description="Overall health status.", examples=["ok"])
    app_name: str = Field(..., examples=["Board Meetings Engine"])
    environment: str = Field(..., description="local/dev/stage/prod", examples=["local"])
    timestamp_utc: datetime = Field(..., examples=["2026-01-01T10:30:00Z"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description=(
        "Lightweight liveness probe. Does not touch the database or the "
        "directory service."
    ),
)
async def health_check() -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        status="ok",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        timestamp_utc=datetime.now(tz=timezone.utc),
    )
