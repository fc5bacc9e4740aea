# board_meetings/models/meeting_event.py
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)

from board_meetings.db.base import Base


class MeetingEvent(Base):
    """
    Immutable audit record of something that happened to a meeting.

    Rows are inserted by the EventLog and never updated or deleted.
    """

    __tablename__ = "meeting_events"

    id = Column(String(36), primary_key=True)

    meeting_id = Column(
        String(36),
        ForeignKey("meetings.id"),
        nullable=False,
        index=True,
    )
    sequence = Column(Integer, nullable=False)

    event_type = Column(String(48), nullable=False, index=True)

    # Populated only for status-changing events
    from_status = Column(String(32), nullable=True)
    from_sub_status = Column(String(32), nullable=True)
    to_status = Column(String(32), nullable=True)
    to_sub_status = Column(String(32), nullable=True)

    performed_by = Column(String(64), nullable=False)
    performed_by_name = Column(String(200), nullable=False)
    performed_at = Column(DateTime(timezone=True), nullable=False)

    payload = Column(JSON, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "meeting_id",
            "sequence",
            name="uq_meeting_events_meeting_sequence",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<MeetingEvent id={self.id} meeting_id={self.meeting_id} "
            f"seq={self.sequence} type={self.event_type}>"
        )
