# board_meetings/main.py
import logging

from fastapi import FastAPI

from board_meetings.api.routes import health, internal, meetings, recurrence
from board_meetings.core.config import get_settings
from board_meetings.core.exceptions import MeetingEngineError, engine_exception_handler
from board_meetings.db.session import init_db_for_startup


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    for noisy in ("httpx", "httpcore", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def create_app() -> FastAPI:
    """
    Application factory for the board meetings engine.
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Meeting lifecycle and recurrence scheduling engine for board governance:\n"
            "status/sub-status state machine, confirmation workflow, append-only\n"
            "event log, recurrence generation and quorum calculation."
        ),
        version="0.1.0",
    )

    app.add_exception_handler(MeetingEngineError, engine_exception_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(meetings.router)
    app.include_router(recurrence.router)
    app.include_router(internal.router)

    @app.on_event("startup")
    async def on_startup() -> None:  # pragma: no cover
        await init_db_for_startup()
        logging.getLogger(__name__).info("%s started (env=%s)", settings.APP_NAME, settings.APP_ENV)

    return app


app = create_app()
