# tests/test_confirmation_policy.py
from datetime import datetime, timezone

import pytest

from board_meetings.core.exceptions import AuthorizationError, ValidationError
from board_meetings.schemas.board import Board, BoardSettings, BoardType
from board_meetings.schemas.lifecycle import APPROVED, DRAFT_COMPLETE, PENDING_APPROVAL, REJECTED
from board_meetings.schemas.meeting import MeetingType
from board_meetings.schemas.meeting_event import MeetingEventRead
from board_meetings.schemas.participant import Actor
from board_meetings.schemas.requirements import MeetingOverrides
from board_meetings.services.confirmation_policy import ConfirmationPolicy

T0 = datetime(2026, 3, 1, 6, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "board_type, meeting_type, settings, expected",
    [
        # Emergency always skips, even on the main board
        (BoardType.MAIN, MeetingType.EMERGENCY, None, False),
        (BoardType.COMMITTEE, MeetingType.EMERGENCY, BoardSettings(confirmation_required=True), False),
        # AGM always requires, even when the board disables confirmation
        (BoardType.FACTORY, MeetingType.AGM, BoardSettings(confirmation_required=False), True),
        (BoardType.COMMITTEE, MeetingType.AGM, None, True),
        # Main board always requires
        (BoardType.MAIN, MeetingType.REGULAR, BoardSettings(confirmation_required=False), True),
        (BoardType.MAIN, MeetingType.SPECIAL, None, True),
        # Factory / subsidiary follow settings, default True
        (BoardType.FACTORY, MeetingType.REGULAR, None, True),
        (BoardType.FACTORY, MeetingType.REGULAR, BoardSettings(confirmation_required=False), False),
        (BoardType.SUBSIDIARY, MeetingType.SPECIAL, BoardSettings(), True),
        (BoardType.SUBSIDIARY, MeetingType.REGULAR, BoardSettings(confirmation_required=False), False),
        # Committee follows settings, default False
        (BoardType.COMMITTEE, MeetingType.REGULAR, None, False),
        (BoardType.COMMITTEE, MeetingType.COMMITTEE, BoardSettings(confirmation_required=True), True),
    ],
)
def test_requires_confirmation_table(board_type, meeting_type, settings, expected):
    assert ConfirmationPolicy.requires_confirmation(board_type, meeting_type, settings) is expected


@pytest.mark.parametrize(
    "board_type, role",
    [
        (BoardType.MAIN, "group_company_secretary"),
        (BoardType.SUBSIDIARY, "company_secretary"),
        (BoardType.FACTORY, "company_secretary"),
        (BoardType.COMMITTEE, "chairman"),
    ],
)
def test_approver_role_by_board_type(board_type, role):
    assert ConfirmationPolicy.approver_role(board_type) == role


def test_board_setting_replaces_default_approver_role():
    board = Board(
        id="b1",
        name="Sub",
        board_type=BoardType.SUBSIDIARY,
        settings=BoardSettings(approver_role="chairman"),
    )
    assert ConfirmationPolicy.approver_role_for(board) == "chairman"


def test_skip_approval_override_short_circuits_with_reason():
    board = Board(id="b1", name="Main", board_type=BoardType.MAIN)
    overrides = MeetingOverrides(skip_approval=True)

    assert (
        ConfirmationPolicy.effective_confirmation(
            board, MeetingType.REGULAR, overrides, "Chairman waived sign-off"
        )
        is False
    )


@pytest.mark.parametrize("reason", [None, "", "   "])
def test_override_without_reason_is_rejected(reason):
    board = Board(id="b1", name="Main", board_type=BoardType.MAIN)

    with pytest.raises(ValidationError):
        ConfirmationPolicy.effective_confirmation(
            board, MeetingType.REGULAR, MeetingOverrides(skip_approval=True), reason
        )
    with pytest.raises(ValidationError):
        ConfirmationPolicy.effective_confirmation(
            board, MeetingType.REGULAR, MeetingOverrides(custom_quorum_percentage=60), reason
        )


def test_authorize_approver_accepts_role_holder():
    board = Board(id="b1", name="Main", board_type=BoardType.MAIN)
    actor = Actor(user_id="5", full_name="Peter", roles=["group_company_secretary"])

    assert ConfirmationPolicy.authorize_approver(actor, board) == "group_company_secretary"


def test_authorize_approver_rejects_missing_role():
    board = Board(id="b1", name="Main", board_type=BoardType.MAIN)
    actor = Actor(user_id="17", full_name="Jane", roles=["company_secretary"])

    with pytest.raises(AuthorizationError):
        ConfirmationPolicy.authorize_approver(actor, board)


def test_system_admin_never_approves_even_with_approver_role():
    board = Board(id="b1", name="Main", board_type=BoardType.MAIN)
    admin = Actor(user_id="99", full_name="Admin", roles=["system_admin", "group_company_secretary"])

    with pytest.raises(AuthorizationError):
        ConfirmationPolicy.authorize_approver(admin, board)


def test_system_admin_configured_as_approver_role_is_rejected():
    board = Board(
        id="b1",
        name="Main",
        board_type=BoardType.MAIN,
        settings=BoardSettings(approver_role="system_admin"),
    )
    actor = Actor(user_id="5", full_name="Peter", roles=["system_admin"])

    with pytest.raises(AuthorizationError):
        ConfirmationPolicy.authorize_approver(actor, board)


def _event(seq: int, event_type: str, payload: dict, name: str = "Peter Otieno") -> MeetingEventRead:
    return MeetingEventRead.model_validate(
        {
            "id": f"e{seq}",
            "meeting_id": "m1",
            "sequence": seq,
            "event_type": event_type,
            "performed_by": "5",
            "performed_by_name": name,
            "performed_at": T0,
            "payload": {"event_type": event_type, **payload},
        }
    )


def _display(state, events):
    return ConfirmationPolicy.confirmation_display(
        state=state,
        requires_confirmation=True,
        approver_role="group_company_secretary",
        prepared_by="17",
        prepared_at=T0,
        events=events,
    )


def test_confirmation_display_states():
    submitted = _event(2, "submitted_for_approval", {"approver_role": "group_company_secretary"})
    approved = _event(3, "approved", {"approver_role": "group_company_secretary"})
    rejected = _event(3, "rejected", {"rejection_reason": "incomplete_information", "comments": "Add budget"})

    assert _display(DRAFT_COMPLETE, []).status == "none"
    assert _display(PENDING_APPROVAL, [submitted]).status == "pending"

    shown = _display(APPROVED, [submitted, approved])
    assert shown.status == "approved"
    assert shown.decided_by == "Peter Otieno"
    assert shown.system_approved is False

    shown = _display(REJECTED, [submitted, rejected])
    assert shown.status == "rejected"
    assert shown.rejection_reason == "incomplete_information"
    assert shown.comments == "Add budget"


def test_confirmation_display_flags_system_approval():
    approved = _event(2, "approved", {"system_approved": True}, name="System")

    shown = _display(APPROVED, [approved])

    assert shown.status == "approved"
    assert shown.system_approved is True
    assert shown.decided_by == "System"
