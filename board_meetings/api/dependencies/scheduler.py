# board_meetings/api/dependencies/scheduler.py
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from board_meetings.core.config import get_settings
from board_meetings.db.session import get_db
from board_meetings.services.date_math import Clock, SystemClock
from board_meetings.services.directory import DirectoryProvider, InMemoryDirectory
from board_meetings.services.directory_client import get_directory_client
from board_meetings.services.scheduler import MeetingScheduler

# Used when no directory service is configured (local runs).
_local_directory = InMemoryDirectory()


def get_directory() -> DirectoryProvider:
    """
    Directory provider for the current deployment.

    The HTTP directory client is used whenever DIRECTORY_BASE_URL is set;
    otherwise an empty in-memory directory is returned. Tests replace this
    dependency through `app.dependency_overrides`.
    """
    if get_settings().DIRECTORY_BASE_URL:
        return get_directory_client()
    return _local_directory


def get_clock() -> Clock:
    return SystemClock()


async def get_scheduler(
    db: AsyncSession = Depends(get_db),
    directory: DirectoryProvider = Depends(get_directory),
    clock: Clock = Depends(get_clock),
) -> MeetingScheduler:
    return MeetingScheduler(session=db, directory=directory, clock=clock)
