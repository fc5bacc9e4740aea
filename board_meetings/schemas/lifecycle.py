# board_meetings/schemas/lifecycle.py
from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError


class MeetingStatus(str, Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DraftSubStatus(str, Enum):
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"


class ScheduledSubStatus(str, Enum):
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class CompletedSubStatus(str, Enum):
    RECENT = "recent"
    ARCHIVED = "archived"


class _State(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def sub_status(self) -> str | None:
        return None

    @property
    def label(self) -> str:
        """Dotted form used in logs and error messages, e.g. 'scheduled.approved'."""
        sub = self.sub_status
        return f"{self.status}.{sub}" if sub else self.status  # type: ignore[attr-defined]


class Draft(_State):
    status: Literal["draft"] = "draft"
    sub: DraftSubStatus

    @property
    def sub_status(self) -> str:
        return self.sub.value


class Scheduled(_State):
    status: Literal["scheduled"] = "scheduled"
    sub: ScheduledSubStatus

    @property
    def sub_status(self) -> str:
        return self.sub.value


class InProgress(_State):
    status: Literal["in_progress"] = "in_progress"


class Completed(_State):
    status: Literal["completed"] = "completed"
    sub: CompletedSubStatus

    @property
    def sub_status(self) -> str:
        return self.sub.value


class Cancelled(_State):
    status: Literal["cancelled"] = "cancelled"


LifecycleState = Annotated[
    Union[Draft, Scheduled, InProgress, Completed, Cancelled],
    Field(discriminator="status"),
]

_state_adapter: TypeAdapter[LifecycleState] = TypeAdapter(LifecycleState)

DRAFT_INCOMPLETE = Draft(sub=DraftSubStatus.INCOMPLETE)
DRAFT_COMPLETE = Draft(sub=DraftSubStatus.COMPLETE)
PENDING_APPROVAL = Scheduled(sub=ScheduledSubStatus.PENDING_APPROVAL)
APPROVED = Scheduled(sub=ScheduledSubStatus.APPROVED)
REJECTED = Scheduled(sub=ScheduledSubStatus.REJECTED)
IN_PROGRESS = InProgress()
COMPLETED_RECENT = Completed(sub=CompletedSubStatus.RECENT)
COMPLETED_ARCHIVED = Completed(sub=CompletedSubStatus.ARCHIVED)
CANCELLED = Cancelled()


def parse_state(status: str, sub_status: str | None) -> LifecycleState:
    """
    Build a lifecycle state from its stored `(status, sub_status)` columns.

    Raises
    ------
    ValueError
        If the pair is not one of the legal combinations.
    """
    data: dict[str, str] = {"status": status}
    if sub_status is not None:
        data["sub"] = sub_status
    try:
        state = _state_adapter.validate_python(data)
    except PydanticValidationError as exc:
        raise ValueError(f"Illegal lifecycle state {status}.{sub_status}") from exc
    if state.sub_status != sub_status:
        # in_progress / cancelled carrying a stray sub-status
        raise ValueError(f"Illegal lifecycle state {status}.{sub_status}")
    return state
