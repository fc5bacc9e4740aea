# board_meetings/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models of the meetings engine.

    Models are registered on `Base.metadata` when `board_meetings.db.session`
    imports them.
    """
    pass
