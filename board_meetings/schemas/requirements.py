# board_meetings/schemas/requirements.py
from pydantic import BaseModel, Field


class MeetingRequirements(BaseModel):
    """
    Setup rules a meeting must satisfy before it counts as `draft.complete`.
    """

    min_participants: int = Field(2, ge=0)
    require_chairman: bool = True
    require_secretary: bool = True
    require_quorum: bool = True
    quorum_percentage: float = Field(50, ge=0, le=100)

    agenda_required: bool = True
    min_agenda_items: int = Field(1, ge=0)

    documents_required: bool = False
    min_documents: int = Field(0, ge=0)

    allow_agenda_override: bool = True
    allow_document_override: bool = True


class RequirementsOverride(BaseModel):
    """
    Partial set of requirement fields; unset fields inherit from the level below.
    """

    min_participants: int | None = Field(None, ge=0)
    require_chairman: bool | None = None
    require_secretary: bool | None = None
    require_quorum: bool | None = None
    quorum_percentage: float | None = Field(None, ge=0, le=100)
    agenda_required: bool | None = None
    min_agenda_items: int | None = Field(None, ge=0)
    documents_required: bool | None = None
    min_documents: int | None = Field(None, ge=0)
    allow_agenda_override: bool | None = None
    allow_document_override: bool | None = None


class MeetingOverrides(BaseModel):
    """
    Explicit, justified waivers of governance rules for one meeting.
    """

    skip_agenda: bool = False
    skip_documents: bool = False
    skip_approval: bool = False
    custom_min_participants: int | None = Field(None, ge=0)
    custom_quorum_percentage: float | None = Field(None, ge=0, le=100)

    def any_set(self) -> bool:
        return (
            self.skip_agenda
            or self.skip_documents
            or self.skip_approval
            or self.custom_min_participants is not None
            or self.custom_quorum_percentage is not None
        )


class MeetingSetup(BaseModel):
    """
    Setup facts reported by the agenda, document and participant collaborators.
    """

    agenda_item_count: int = Field(0, ge=0, examples=[3])
    document_count: int = Field(0, ge=0, examples=[2])
    has_chairman: bool = Field(False, examples=[True])
    has_secretary: bool = Field(False, examples=[True])


class RequirementIssue(BaseModel):
    field: str = Field(..., examples=["agenda"])
    code: str = Field(..., examples=["INSUFFICIENT_AGENDA_ITEMS"])
    message: str


class RequirementsCheck(BaseModel):
    """
    Outcome of validating a meeting's setup against its merged requirements.
    """

    is_complete: bool
    errors: list[RequirementIssue] = Field(default_factory=list)
    waived: list[str] = Field(
        default_factory=list,
        description="Requirements waived through meeting overrides.",
    )
