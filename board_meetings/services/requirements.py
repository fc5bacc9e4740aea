# board_meetings/services/requirements.py
from __future__ import annotations

from collections.abc import Sequence

from board_meetings.schemas.board import Board
from board_meetings.schemas.meeting import MeetingType
from board_meetings.schemas.participant import Participant
from board_meetings.schemas.requirements import (
    MeetingOverrides,
    MeetingRequirements,
    MeetingSetup,
    RequirementIssue,
    RequirementsCheck,
    RequirementsOverride,
)
from board_meetings.services.quorum import QuorumCalculator

# Meeting-type adjustments applied on top of system and board settings.
MEETING_TYPE_REQUIREMENTS: dict[MeetingType, RequirementsOverride] = {
    MeetingType.EMERGENCY: RequirementsOverride(agenda_required=False, min_agenda_items=0),
    MeetingType.SPECIAL: RequirementsOverride(min_agenda_items=1),
    MeetingType.REGULAR: RequirementsOverride(min_agenda_items=3),
    MeetingType.AGM: RequirementsOverride(
        min_agenda_items=5,
        documents_required=True,
        min_documents=2,
    ),
}


def _apply(base: MeetingRequirements, layer: RequirementsOverride | None) -> MeetingRequirements:
    if layer is None:
        return base
    return base.model_copy(update=layer.model_dump(exclude_none=True))


class RequirementsValidator:
    """
    Decides whether a meeting's setup is complete.

    Requirements are merged hierarchically, each level overriding the one
    before it:

    1) system defaults (`MeetingRequirements()`)
    2) board settings (`board.settings.requirements`)
    3) meeting-type rules (`MEETING_TYPE_REQUIREMENTS`)
    4) per-meeting overrides (skip agenda / documents, custom minimums)

    Skipping the agenda or documents only takes effect when the merged
    requirements allow that override.
    """

    @staticmethod
    def merge(
        board: Board,
        meeting_type: MeetingType,
        overrides: MeetingOverrides | None = None,
    ) -> MeetingRequirements:
        merged = MeetingRequirements()
        merged = _apply(merged, board.settings.requirements)
        merged = _apply(merged, MEETING_TYPE_REQUIREMENTS.get(meeting_type))

        if overrides is None:
            return merged

        update: dict[str, object] = {}
        if overrides.skip_agenda and merged.allow_agenda_override:
            update.update(agenda_required=False, min_agenda_items=0)
        if overrides.skip_documents and merged.allow_document_override:
            update.update(documents_required=False, min_documents=0)
        if overrides.custom_min_participants is not None:
            update["min_participants"] = overrides.custom_min_participants
        if overrides.custom_quorum_percentage is not None:
            update["quorum_percentage"] = overrides.custom_quorum_percentage
        return merged.model_copy(update=update)

    @staticmethod
    def validate(
        requirements: MeetingRequirements,
        setup: MeetingSetup,
        participants: Sequence[Participant],
        quorum_percentage: float,
        overrides: MeetingOverrides | None = None,
    ) -> RequirementsCheck:
        errors: list[RequirementIssue] = []

        if len(participants) < requirements.min_participants:
            errors.append(
                RequirementIssue(
                    field="participants",
                    code="INSUFFICIENT_PARTICIPANTS",
                    message=(
                        f"At least {requirements.min_participants} participants required. "
                        f"Currently have {len(participants)}."
                    ),
                )
            )
        if requirements.require_chairman and not setup.has_chairman:
            errors.append(
                RequirementIssue(
                    field="participants",
                    code="MISSING_CHAIRMAN",
                    message="Chairman is required for this meeting.",
                )
            )
        if requirements.require_secretary and not setup.has_secretary:
            errors.append(
                RequirementIssue(
                    field="participants",
                    code="MISSING_SECRETARY",
                    message="Secretary is required for this meeting.",
                )
            )
        if requirements.require_quorum:
            summary = QuorumCalculator.summarize(participants, quorum_percentage)
            if not summary.can_meet_quorum:
                errors.append(
                    RequirementIssue(
                        field="participants",
                        code="QUORUM_NOT_MET",
                        message=(
                            f"Quorum not met. Need {summary.required_count} members "
                            f"({quorum_percentage:g}%), have {summary.non_guest_count}."
                        ),
                    )
                )

        if requirements.agenda_required and setup.agenda_item_count == 0:
            errors.append(
                RequirementIssue(
                    field="agenda",
                    code="AGENDA_REQUIRED",
                    message="Agenda is required for this meeting.",
                )
            )
        if setup.agenda_item_count < requirements.min_agenda_items:
            errors.append(
                RequirementIssue(
                    field="agenda",
                    code="INSUFFICIENT_AGENDA_ITEMS",
                    message=(
                        f"At least {requirements.min_agenda_items} agenda items required. "
                        f"Currently have {setup.agenda_item_count}."
                    ),
                )
            )

        if requirements.documents_required and setup.document_count == 0:
            errors.append(
                RequirementIssue(
                    field="documents",
                    code="DOCUMENTS_REQUIRED",
                    message="Documents are required for this meeting.",
                )
            )
        if requirements.min_documents and setup.document_count < requirements.min_documents:
            errors.append(
                RequirementIssue(
                    field="documents",
                    code="INSUFFICIENT_DOCUMENTS",
                    message=(
                        f"At least {requirements.min_documents} documents required. "
                        f"Currently have {setup.document_count}."
                    ),
                )
            )

        waived: list[str] = []
        if overrides is not None:
            # Only waivers that merge() actually honoured
            if overrides.skip_agenda and requirements.allow_agenda_override:
                waived.append("agenda")
            if overrides.skip_documents and requirements.allow_document_override:
                waived.append("documents")
            if overrides.skip_approval:
                waived.append("approval")

        return RequirementsCheck(is_complete=not errors, errors=errors, waived=waived)
