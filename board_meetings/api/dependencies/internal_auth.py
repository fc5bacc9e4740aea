# board_meetings/api/dependencies/internal_auth.py
from http import HTTPStatus
from typing import Optional

from fastapi import Header, HTTPException

from board_meetings.core.config import get_settings

_OPEN_ENVIRONMENTS = ("local", "test")


async def verify_internal_api_key(
    internal_api_key: Optional[str] = Header(
        default=None,
        alias="X-Internal-Api-Key",
        description="Internal API key required for /internal endpoints outside local/test.",
    ),
) -> None:
    """
    Dependency protecting the /internal job endpoints (e.g. the archive run).

    Rules
    -----
    - APP_ENV in ("local", "test"):
        - INTERNAL_API_KEY unset -> endpoints are open.
        - INTERNAL_API_KEY set   -> header must match.
    - Any other APP_ENV:
        - INTERNAL_API_KEY unset -> 500, the deployment is misconfigured.
        - Header missing or different -> 401.
    """
    settings = get_settings()
    env = (settings.APP_ENV or "local").lower()
    expected = settings.INTERNAL_API_KEY

    if not expected:
        if env in _OPEN_ENVIRONMENTS:
            return
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail="INTERNAL_API_KEY not configured for this environment.",
        )

    if internal_api_key != expected:
        raise HTTPException(
            status_code=HTTPStatus.UNAUTHORIZED,
            detail="Invalid or missing internal API key.",
        )
