# board_meetings/services/confirmation_policy.py
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from board_meetings.core.exceptions import AuthorizationError, ValidationError
from board_meetings.schemas.board import Board, BoardSettings, BoardType
from board_meetings.schemas.lifecycle import LifecycleState, ScheduledSubStatus
from board_meetings.schemas.meeting import ConfirmationDisplay, MeetingType
from board_meetings.schemas.meeting_event import (
    APPROVAL_EVENT_TYPES,
    ApprovedPayload,
    MeetingEventRead,
    MeetingEventType,
    RejectedPayload,
)
from board_meetings.schemas.participant import SYSTEM_ADMIN_ROLE, Actor
from board_meetings.schemas.requirements import MeetingOverrides

_DEFAULT_APPROVER_ROLES: dict[BoardType, str] = {
    BoardType.MAIN: "group_company_secretary",
    BoardType.SUBSIDIARY: "company_secretary",
    BoardType.FACTORY: "company_secretary",
    BoardType.COMMITTEE: "chairman",
}


class ConfirmationPolicy:
    """
    Decides whether a meeting needs sign-off and who may give it.

    Rules (first match wins)
    ------------------------
    1) Emergency meetings        => no confirmation
    2) AGM                       => confirmation
    3) Main board                => confirmation
    4) Factory / subsidiary      => board setting, default True
    5) Committee                 => board setting, default False
    6) Anything else             => confirmation

    Every function takes the board explicitly; nothing is read from an
    ambient "current board".
    """

    @staticmethod
    def requires_confirmation(
        board_type: BoardType,
        meeting_type: MeetingType,
        board_settings: BoardSettings | None = None,
    ) -> bool:
        configured = board_settings.confirmation_required if board_settings else None

        if meeting_type == MeetingType.EMERGENCY:
            return False
        if meeting_type == MeetingType.AGM:
            return True
        if board_type == BoardType.MAIN:
            return True
        if board_type in (BoardType.FACTORY, BoardType.SUBSIDIARY):
            return True if configured is None else configured
        if board_type == BoardType.COMMITTEE:
            return False if configured is None else configured
        return True

    @staticmethod
    def approver_role(board_type: BoardType) -> str:
        return _DEFAULT_APPROVER_ROLES.get(board_type, "group_company_secretary")

    @staticmethod
    def approver_role_for(board: Board) -> str:
        """Board-configured approver role, falling back to the board-type default."""
        return board.settings.approver_role or ConfirmationPolicy.approver_role(board.board_type)

    @staticmethod
    def check_override_reason(
        overrides: MeetingOverrides | None, override_reason: str | None
    ) -> None:
        if overrides is not None and overrides.any_set():
            if not override_reason or not override_reason.strip():
                raise ValidationError(
                    "override_reason is required when any override is set.",
                    field="override_reason",
                )

    @staticmethod
    def effective_confirmation(
        board: Board,
        meeting_type: MeetingType,
        overrides: MeetingOverrides | None = None,
        override_reason: str | None = None,
    ) -> bool:
        """
        Confirmation requirement after applying a per-meeting `skip_approval`.

        Raises
        ------
        ValidationError
            If an override is set without a non-empty reason.
        """
        ConfirmationPolicy.check_override_reason(overrides, override_reason)
        if overrides is not None and overrides.skip_approval:
            return False
        return ConfirmationPolicy.requires_confirmation(
            board.board_type, meeting_type, board.settings
        )

    @staticmethod
    def authorize_approver(actor: Actor, board: Board) -> str:
        """
        Ensure `actor` may approve or reject meetings of `board`.

        System administrators manage the platform but never act as governance
        approvers, even when they also hold the approver role.

        Returns
        -------
        str
            The approver role that was checked.
        """
        role = ConfirmationPolicy.approver_role_for(board)

        if role == SYSTEM_ADMIN_ROLE:
            raise AuthorizationError(
                f"Board {board.id} is configured with '{SYSTEM_ADMIN_ROLE}' as approver role; "
                "system administrators cannot approve meetings.",
                board_id=board.id,
                required_role=role,
            )
        if actor.is_system_admin:
            raise AuthorizationError(
                "System administrators cannot approve or reject meetings.",
                actor_id=actor.user_id,
                required_role=role,
            )
        if role not in actor.roles:
            raise AuthorizationError(
                f"Approving meetings of board {board.id} requires role '{role}'.",
                actor_id=actor.user_id,
                required_role=role,
            )
        return role

    @staticmethod
    def confirmation_display(
        state: LifecycleState,
        requires_confirmation: bool,
        approver_role: str,
        prepared_by: str,
        prepared_at: datetime,
        events: Sequence[MeetingEventRead],
    ) -> ConfirmationDisplay:
        """
        Build the confirmation panel for a meeting.

        The status follows the meeting's current sub-status; the decision
        details come from the most recent approval-related event.
        """
        sub = state.sub_status
        if sub == ScheduledSubStatus.APPROVED.value:
            status = "approved"
        elif sub == ScheduledSubStatus.REJECTED.value:
            status = "rejected"
        elif sub == ScheduledSubStatus.PENDING_APPROVAL.value:
            status = "pending"
        else:
            status = "none"

        latest: MeetingEventRead | None = None
        for event in events:
            if event.event_type in APPROVAL_EVENT_TYPES:
                latest = event

        display = ConfirmationDisplay(
            status=status,
            requires_confirmation=requires_confirmation,
            approver_role=approver_role,
            prepared_by=prepared_by,
            prepared_at=prepared_at,
        )
        if latest is None or status == "pending":
            return display

        if latest.event_type == MeetingEventType.APPROVED and status == "approved":
            payload = latest.payload
            system_approved = isinstance(payload, ApprovedPayload) and payload.system_approved
            return display.model_copy(
                update={
                    "decided_by": latest.performed_by_name,
                    "decided_at": latest.performed_at,
                    "system_approved": system_approved,
                }
            )
        if latest.event_type == MeetingEventType.REJECTED and status == "rejected":
            payload = latest.payload
            return display.model_copy(
                update={
                    "decided_by": latest.performed_by_name,
                    "decided_at": latest.performed_at,
                    "rejection_reason": (
                        payload.rejection_reason if isinstance(payload, RejectedPayload) else None
                    ),
                    "comments": payload.comments if isinstance(payload, RejectedPayload) else None,
                }
            )
        return display
