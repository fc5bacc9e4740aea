# board_meetings/models/meeting.py
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    Time,
)

from board_meetings.db.base import Base
from board_meetings.schemas.lifecycle import LifecycleState, parse_state


class Meeting(Base):
    """
    A scheduled unit of governance activity.

    `status` / `sub_status` are a materialized projection of the meeting's
    event log and are only ever written together with an event append.
    """

    __tablename__ = "meetings"

    id = Column(String(36), primary_key=True)
    board_id = Column(String(64), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    meeting_type = Column(String(32), nullable=False)
    location_type = Column(String(32), nullable=False)

    scheduled_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    timezone = Column(String(64), nullable=False)

    status = Column(String(32), nullable=False, default="draft", index=True)
    sub_status = Column(String(32), nullable=True)

    quorum_percentage = Column(Float, nullable=False, default=50.0)
    quorum_required = Column(Integer, nullable=False, default=0)
    requires_confirmation = Column(Boolean, nullable=False, default=True)
    overrides = Column(JSON, nullable=True)
    override_reason = Column(Text, nullable=True)

    agenda_item_count = Column(Integer, nullable=False, default=0)
    document_count = Column(Integer, nullable=False, default=0)
    has_chairman = Column(Boolean, nullable=False, default=False)
    has_secretary = Column(Boolean, nullable=False, default=False)

    series_id = Column(String(36), nullable=True, index=True)
    series_position = Column(Integer, nullable=True)

    created_by = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    status_updated_at = Column(DateTime(timezone=True), nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    cancelled_by = Column(String(64), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_meetings_series_position", "series_id", "series_position"),
    )

    @property
    def state(self) -> LifecycleState:
        return parse_state(self.status, self.sub_status)

    @state.setter
    def state(self, value: LifecycleState) -> None:
        self.status = value.status
        self.sub_status = value.sub_status

    def __repr__(self) -> str:
        return (
            f"<Meeting id={self.id} board_id={self.board_id} "
            f"date={self.scheduled_date} state={self.status}.{self.sub_status}>"
        )
