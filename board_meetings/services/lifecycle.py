# board_meetings/services/lifecycle.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from board_meetings.core.exceptions import InvalidTransitionError, ValidationError
from board_meetings.schemas.lifecycle import (
    APPROVED,
    CANCELLED,
    COMPLETED_ARCHIVED,
    COMPLETED_RECENT,
    DRAFT_COMPLETE,
    DRAFT_INCOMPLETE,
    IN_PROGRESS,
    PENDING_APPROVAL,
    REJECTED,
    Draft,
    LifecycleState,
    Scheduled,
    parse_state,
)
from board_meetings.schemas.meeting_event import MeetingEventType


@dataclass(frozen=True)
class Transition:
    """
    Result of a legal lifecycle step: where the meeting was, where it goes,
    and which event records the move.
    """

    from_state: LifecycleState | None
    to_state: LifecycleState
    event_type: MeetingEventType

    @property
    def changes_state(self) -> bool:
        return self.from_state != self.to_state


def _require(state: LifecycleState, allowed: tuple[LifecycleState, ...], requested: str) -> None:
    if state not in allowed:
        raise InvalidTransitionError(current=state.label, requested=requested)


def _require_reason(reason: str | None, field: str) -> str:
    if reason is None or not reason.strip():
        raise ValidationError(f"A non-empty {field} is required.", field=field)
    return reason.strip()


class LifecycleStateMachine:
    """
    Transition guards of the meeting lifecycle.

        draft.incomplete <-> draft.complete
        draft.complete   -> scheduled.pending_approval | scheduled.approved
        scheduled.pending_approval -> scheduled.approved | scheduled.rejected
        scheduled.rejected -> scheduled.pending_approval
        scheduled.approved -> in_progress -> completed.recent -> completed.archived
        draft.* | scheduled.* -> cancelled

    Every method is pure: it either returns the Transition to apply or raises.
    Persisting the new state together with its event is the caller's job.
    """

    @staticmethod
    def load(status: str, sub_status: str | None) -> LifecycleState:
        """Parse stored columns, treating an illegal pair as a lifecycle anomaly."""
        try:
            return parse_state(status, sub_status)
        except ValueError as exc:
            raise InvalidTransitionError(
                current=f"{status}.{sub_status}",
                requested="load",
                message=str(exc),
            ) from exc

    @staticmethod
    def initial_state(setup_complete: bool) -> Transition:
        return Transition(
            from_state=None,
            to_state=DRAFT_COMPLETE if setup_complete else DRAFT_INCOMPLETE,
            event_type=MeetingEventType.MEETING_CREATED,
        )

    @staticmethod
    def complete_setup(state: LifecycleState, setup_complete: bool) -> Transition | None:
        """
        Move between the two draft sub-states as setup facts change.

        Returns None when the draft sub-state already matches.
        """
        if not isinstance(state, Draft):
            raise InvalidTransitionError(current=state.label, requested="update setup")
        target = DRAFT_COMPLETE if setup_complete else DRAFT_INCOMPLETE
        if target == state:
            return None
        return Transition(state, target, MeetingEventType.CONFIGURATION_COMPLETE)

    @staticmethod
    def submit(state: LifecycleState, requires_confirmation: bool) -> Transition:
        _require(state, (DRAFT_COMPLETE,), "submit")
        if requires_confirmation:
            return Transition(state, PENDING_APPROVAL, MeetingEventType.SUBMITTED_FOR_APPROVAL)
        return Transition(state, APPROVED, MeetingEventType.APPROVED)

    @staticmethod
    def approve(state: LifecycleState) -> Transition:
        _require(state, (PENDING_APPROVAL,), "approve")
        return Transition(state, APPROVED, MeetingEventType.APPROVED)

    @staticmethod
    def reject(state: LifecycleState, reason: str | None) -> Transition:
        _require(state, (PENDING_APPROVAL,), "reject")
        _require_reason(reason, "reason")
        return Transition(state, REJECTED, MeetingEventType.REJECTED)

    @staticmethod
    def resubmit(state: LifecycleState) -> Transition:
        _require(state, (REJECTED,), "resubmit")
        return Transition(state, PENDING_APPROVAL, MeetingEventType.RESUBMITTED)

    @staticmethod
    def start(
        state: LifecycleState,
        now: datetime,
        scheduled_start: datetime,
        enforce_start_time: bool = True,
    ) -> Transition:
        _require(state, (APPROVED,), "start")
        if enforce_start_time and now < scheduled_start:
            raise InvalidTransitionError(
                current=state.label,
                requested="start",
                message=(
                    "Cannot start a meeting before its scheduled start "
                    f"({scheduled_start.isoformat()})."
                ),
            )
        return Transition(state, IN_PROGRESS, MeetingEventType.MEETING_STARTED)

    @staticmethod
    def end(state: LifecycleState) -> Transition:
        _require(state, (IN_PROGRESS,), "end")
        return Transition(state, COMPLETED_RECENT, MeetingEventType.MEETING_ENDED)

    @staticmethod
    def archive(state: LifecycleState) -> Transition:
        _require(state, (COMPLETED_RECENT,), "archive")
        return Transition(state, COMPLETED_ARCHIVED, MeetingEventType.ARCHIVED)

    @staticmethod
    def cancel(state: LifecycleState, reason: str | None) -> Transition:
        if not isinstance(state, (Draft, Scheduled)):
            raise InvalidTransitionError(current=state.label, requested="cancel")
        _require_reason(reason, "reason")
        return Transition(state, CANCELLED, MeetingEventType.MEETING_CANCELLED)

    @staticmethod
    def reschedule(state: LifecycleState, requires_confirmation: bool) -> Transition:
        """
        Moving an approved meeting invalidates its sign-off when confirmation
        is required; every other schedulable state is kept as is.
        """
        _require(
            state,
            (DRAFT_INCOMPLETE, DRAFT_COMPLETE, PENDING_APPROVAL, APPROVED, REJECTED),
            "reschedule",
        )
        target = PENDING_APPROVAL if state == APPROVED and requires_confirmation else state
        return Transition(state, target, MeetingEventType.RESCHEDULED)
