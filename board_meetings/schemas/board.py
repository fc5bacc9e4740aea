# board_meetings/schemas/board.py
from enum import Enum

from pydantic import BaseModel, Field

from board_meetings.schemas.requirements import RequirementsOverride


class BoardType(str, Enum):
    """
    Kind of governing body a meeting belongs to.
    """

    MAIN = "main"
    SUBSIDIARY = "subsidiary"
    FACTORY = "factory"
    COMMITTEE = "committee"


class BoardSettings(BaseModel):
    """
    Per-board governance settings, owned by the directory service.
    """

    confirmation_required: bool | None = Field(
        None,
        description=(
            "Whether meetings of this board need sign-off. When unset, the "
            "board-type default applies."
        ),
        examples=[True],
    )
    approver_role: str | None = Field(
        None,
        description="Role code that replaces the board-type default approver role.",
        examples=["company_secretary"],
    )
    requirements: RequirementsOverride | None = Field(
        None,
        description="Board-level adjustments to the system default meeting requirements.",
    )


class Board(BaseModel):
    """
    Board or committee as seen by the engine.
    """

    id: str = Field(..., description="Opaque board identifier.", examples=["ktda-ms"])
    name: str = Field(..., description="Display name of the board.", examples=["Main Board"])
    board_type: BoardType = Field(..., description="Kind of board.", examples=["main"])
    settings: BoardSettings = Field(default_factory=BoardSettings)
