# board_meetings/schemas/participant.py
from pydantic import BaseModel, Field

SYSTEM_ADMIN_ROLE = "system_admin"


class Participant(BaseModel):
    """
    Entry of a board's participant roster.

    Only `is_guest` and the number of entries matter to quorum math.
    """

    user_id: str = Field(..., description="Identifier of the participant.", examples=["17"])
    is_guest: bool = Field(
        False,
        description="Guests never count towards quorum.",
        examples=[False],
    )
    role: str | None = Field(None, description="Role label on this board.", examples=["member"])


class Actor(BaseModel):
    """
    User performing an action, with the role codes they currently hold.
    """

    user_id: str = Field(..., description="Identifier of the acting user.", examples=["5"])
    full_name: str = Field(..., description="Display name at the time of the action.")
    roles: list[str] = Field(
        default_factory=list,
        description="Role codes held by the user on any board.",
        examples=[["company_secretary"]],
    )

    @property
    def is_system_admin(self) -> bool:
        return SYSTEM_ADMIN_ROLE in self.roles


SYSTEM_ACTOR = Actor(user_id="system", full_name="System", roles=[])


class QuorumSummary(BaseModel):
    """
    Quorum figures for a meeting, computed from the live roster.
    """

    participant_count: int = Field(..., examples=[10])
    guest_count: int = Field(..., examples=[2])
    non_guest_count: int = Field(..., examples=[8])
    quorum_percentage: float = Field(..., examples=[50.0])
    required_count: int = Field(..., examples=[4])
    can_meet_quorum: bool = Field(..., examples=[True])
