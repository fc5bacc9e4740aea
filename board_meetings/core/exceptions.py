"""
Domain exceptions and the FastAPI handlers that render them.

The engine raises these from pure services and the scheduler; only the
handlers at the bottom of this module know about HTTP.
"""
import logging
from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MeetingEngineError(Exception):
    """Base class for every error raised by the meeting engine."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "error": type(self).__name__, **self.context}


class ValidationError(MeetingEngineError):
    """Malformed input, missing required fields or an empty mandatory reason."""

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY


class InvalidTransitionError(MeetingEngineError):
    """
    A lifecycle transition was requested from a state that does not allow it.

    This is a data-integrity problem rather than a user error: clients are
    expected to only offer actions that are legal for the current state.
    """

    status_code = HTTPStatus.CONFLICT

    def __init__(self, current: str, requested: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Cannot {requested} a meeting in state '{current}'.",
            current_state=current,
            requested=requested,
        )
        self.current = current
        self.requested = requested


class AuthorizationError(MeetingEngineError):
    """The acting user does not hold the role required for this action."""

    status_code = HTTPStatus.FORBIDDEN


class RecurrenceBoundsError(MeetingEngineError):
    """A recurrence pattern that cannot produce any occurrence."""

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY


class NotFoundError(MeetingEngineError):
    status_code = HTTPStatus.NOT_FOUND


class ConcurrencyError(MeetingEngineError):
    """The meeting was modified by another request since it was read."""

    status_code = HTTPStatus.CONFLICT


class DirectoryClientError(MeetingEngineError):
    """
    The directory service (boards, rosters, actor profiles) could not be
    reached or returned an unusable response.
    """

    status_code = HTTPStatus.BAD_GATEWAY


async def engine_exception_handler(request: Request, exc: MeetingEngineError) -> JSONResponse:
    """Render engine errors with their type and context."""
    if isinstance(exc, InvalidTransitionError):
        logger.warning(
            "Lifecycle anomaly on %s %s: %s", request.method, request.url.path, exc.message
        )
    return JSONResponse(status_code=int(exc.status_code), content=exc.to_dict())
