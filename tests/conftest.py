# tests/conftest.py
import asyncio
import os

# Settings are cached on first access, so the test environment must be in
# place before anything from board_meetings is imported.
os.environ["APP_ENV"] = "test"
os.environ["DB_URL"] = "sqlite+aiosqlite:///./test_board_meetings.db"
os.environ["DEFAULT_TIMEZONE"] = "Africa/Nairobi"
os.environ.pop("INTERNAL_API_KEY", None)
os.environ.pop("DIRECTORY_BASE_URL", None)

from datetime import date, datetime, time, timezone  # noqa: E402
from typing import Any, Callable  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from board_meetings.api.dependencies.scheduler import get_clock, get_directory  # noqa: E402
from board_meetings.db.session import AsyncSessionLocal, init_db  # noqa: E402
from board_meetings.main import create_app  # noqa: E402
from board_meetings.schemas.board import Board, BoardSettings, BoardType  # noqa: E402
from board_meetings.schemas.meeting import MeetingCreate  # noqa: E402
from board_meetings.schemas.participant import Actor, Participant  # noqa: E402
from board_meetings.services.date_math import FixedClock  # noqa: E402
from board_meetings.services.directory import InMemoryDirectory  # noqa: E402
from board_meetings.services.scheduler import MeetingScheduler  # noqa: E402

# 2026-03-01 09:00 in Nairobi (UTC+3)
NOW = datetime(2026, 3, 1, 6, 0, tzinfo=timezone.utc)


def _roster(members: int, guests: int = 0) -> list[Participant]:
    roster = [Participant(user_id=f"m{i}", role="member") for i in range(1, members + 1)]
    roster += [Participant(user_id=f"g{i}", is_guest=True, role="guest") for i in range(1, guests + 1)]
    return roster


@pytest.fixture
def directory() -> InMemoryDirectory:
    """
    Directory seeded with one board of each type and the usual cast of actors.

    - main-board:      8 members + 2 guests
    - factory-board:   confirmation explicitly disabled
    - committee-board: default settings (no confirmation)
    - rogue-board:     misconfigured with system_admin as approver role
    """
    return InMemoryDirectory(
        boards=[
            Board(id="main-board", name="Main Board", board_type=BoardType.MAIN),
            Board(
                id="factory-board",
                name="Factory Board",
                board_type=BoardType.FACTORY,
                settings=BoardSettings(confirmation_required=False),
            ),
            Board(id="committee-board", name="Audit Committee", board_type=BoardType.COMMITTEE),
            Board(
                id="rogue-board",
                name="Misconfigured Board",
                board_type=BoardType.MAIN,
                settings=BoardSettings(approver_role="system_admin"),
            ),
        ],
        participants={
            "main-board": _roster(8, guests=2),
            "factory-board": _roster(5),
            "committee-board": _roster(4),
            "rogue-board": _roster(4),
        },
        actors=[
            Actor(user_id="17", full_name="Jane Wanjiru", roles=["company_secretary"]),
            Actor(user_id="5", full_name="Peter Otieno", roles=["group_company_secretary"]),
            Actor(user_id="3", full_name="Mary Achieng", roles=["chairman"]),
            Actor(
                user_id="99",
                full_name="Admin User",
                roles=["system_admin", "group_company_secretary"],
            ),
            Actor(user_id="42", full_name="Board Member", roles=["board_member"]),
        ],
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def build_request() -> Callable[..., MeetingCreate]:
    """
    Factory for MeetingCreate payloads with a complete setup for a regular
    main-board meeting on 2026-03-10 10:00.
    """

    def _build(**overrides: Any) -> MeetingCreate:
        data: dict[str, Any] = {
            "board_id": "main-board",
            "title": "Q1 Board Meeting",
            "meeting_type": "regular",
            "location_type": "hybrid",
            "schedule": {
                "scheduled_date": date(2026, 3, 10),
                "start_time": time(10, 0),
                "duration_minutes": 120,
            },
            "setup": {
                "agenda_item_count": 3,
                "document_count": 1,
                "has_chairman": True,
                "has_secretary": True,
            },
            "created_by": "17",
        }
        data.update(overrides)
        return MeetingCreate.model_validate(data)

    return _build


@pytest_asyncio.fixture
async def db_session():
    """
    Fresh schema and a dedicated AsyncSession for each async test.
    """
    await init_db()
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def scheduler(db_session, directory, clock) -> MeetingScheduler:
    return MeetingScheduler(session=db_session, directory=directory, clock=clock)


@pytest.fixture
def client(directory, clock) -> TestClient:
    """
    TestClient over a freshly reset database, with the directory and clock
    replaced through dependency overrides.
    """
    asyncio.run(init_db())

    app = create_app()
    app.dependency_overrides[get_directory] = lambda: directory
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
