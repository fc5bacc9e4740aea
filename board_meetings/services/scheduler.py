# board_meetings/services/scheduler.py
from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable, Sequence
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from board_meetings.core.config import Settings, get_settings
from board_meetings.core.exceptions import ConcurrencyError, MeetingEngineError, ValidationError
from board_meetings.models.meeting import Meeting
from board_meetings.schemas.board import Board
from board_meetings.schemas.lifecycle import LifecycleState, MeetingStatus
from board_meetings.schemas.meeting import (
    ArchiveRunResult,
    ConfirmationDisplay,
    MeetingCreate,
    MeetingCreationResult,
    MeetingRead,
    MeetingType,
    OccurrenceResult,
    OccurrenceStatus,
)
from board_meetings.schemas.meeting_event import (
    LIFECYCLE_EVENT_TYPES,
    ApprovedPayload,
    ArchivedPayload,
    CancelledPayload,
    ConfigurationCompletePayload,
    EventPayload,
    MeetingCreatedPayload,
    MeetingEndedPayload,
    MeetingEventRead,
    MeetingEventType,
    MeetingStartedPayload,
    RejectedPayload,
    ResubmittedPayload,
    SchedulePayload,
    SubmittedForApprovalPayload,
)
from board_meetings.schemas.participant import SYSTEM_ACTOR, Actor, Participant, QuorumSummary
from board_meetings.schemas.recurrence import RecurrencePattern
from board_meetings.schemas.requirements import MeetingOverrides, MeetingSetup, RequirementsCheck
from board_meetings.services.confirmation_policy import ConfirmationPolicy
from board_meetings.services.date_math import (
    Clock,
    SystemClock,
    end_time_for,
    resolve_timezone,
    scheduled_start,
)
from board_meetings.services.directory import DirectoryProvider
from board_meetings.services.event_log import EventLog
from board_meetings.services.lifecycle import LifecycleStateMachine, Transition
from board_meetings.services.meeting_repository import MeetingRepository
from board_meetings.services.quorum import QuorumCalculator
from board_meetings.services.recurrence import RecurrenceEngine
from board_meetings.services.requirements import RequirementsValidator

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _stored_overrides(meeting: Meeting) -> MeetingOverrides | None:
    if not meeting.overrides:
        return None
    return MeetingOverrides.model_validate(meeting.overrides)


def _effective_quorum_percentage(quorum_percentage: float, overrides: MeetingOverrides | None) -> float:
    if overrides is not None and overrides.custom_quorum_percentage is not None:
        return overrides.custom_quorum_percentage
    return quorum_percentage


def _state(meeting: Meeting) -> LifecycleState:
    return LifecycleStateMachine.load(meeting.status, meeting.sub_status)


class MeetingScheduler:
    """
    Orchestrates meeting creation and every lifecycle action.

    Responsibilities
    ----------------
    - Expand recurrence patterns into one meeting per scheduled occurrence.
    - Apply the confirmation policy, requirements validation and quorum math
      using live board data from the directory.
    - Drive the lifecycle state machine and record each transition in the
      event log.

    Notes
    -----
    - Every state change is committed in the same transaction as its event.
      On any failure the transaction is rolled back and the stored meeting is
      left as it was.
    - Each occurrence of a series is created in its own transaction, so one
      bad date never takes the rest of the series down with it.
    - A concurrent modification (stale `version`) surfaces as ConcurrencyError.
    """

    def __init__(
        self,
        session: AsyncSession,
        directory: DirectoryProvider,
        clock: Clock | None = None,
        settings: Settings | None = None,
        recurrence_engine: RecurrenceEngine | None = None,
    ) -> None:
        self._session = session
        self._directory = directory
        self._clock = clock or SystemClock()
        self._settings = settings or get_settings()
        self._recurrence = recurrence_engine or RecurrenceEngine(
            max_occurrences=self._settings.RECURRENCE_MAX_OCCURRENCES,
            horizon_years=self._settings.RECURRENCE_HORIZON_YEARS,
        )
        self._meetings = MeetingRepository(session)
        self._events = EventLog(session)

    # ------------------------------------------------------------------
    # Transaction helpers
    # ------------------------------------------------------------------

    def _now(self) -> datetime:
        return _as_utc(self._clock.now())

    async def _commit_or_rollback(self, work: Callable[[], Awaitable[Meeting]]) -> MeetingRead:
        """
        Run `work` and commit, or roll back and re-raise.

        The meeting is converted to its read model right after commit, while
        its attributes are still loaded.
        """
        try:
            meeting = await work()
            await self._session.commit()
        except (StaleDataError, IntegrityError) as exc:
            await self._session.rollback()
            logger.warning("Concurrent modification detected: %s", exc)
            raise ConcurrencyError(
                "The meeting was modified concurrently; reload and retry."
            ) from exc
        except Exception:
            await self._session.rollback()
            raise
        return MeetingRead.model_validate(meeting)

    async def _mutate(
        self,
        meeting_id: str,
        work: Callable[[Meeting, datetime], Awaitable[None]],
    ) -> MeetingRead:
        now = self._now()

        async def _run() -> Meeting:
            meeting = await self._meetings.get(meeting_id)
            await work(meeting, now)
            return meeting

        return await self._commit_or_rollback(_run)

    async def _record(
        self,
        meeting: Meeting,
        transition: Transition,
        payload: EventPayload,
        actor: Actor,
        now: datetime,
    ) -> None:
        """Apply a transition to the meeting row and append its event."""
        if transition.changes_state:
            meeting.state = transition.to_state
            meeting.status_updated_at = now
        meeting.updated_at = now
        await self._events.append(
            meeting_id=meeting.id,
            payload=payload,
            actor=actor,
            performed_at=now,
            # Status columns are only filled for events that move the meeting
            transition=transition if transition.changes_state else None,
        )
        logger.info(
            "Meeting %s: %s -> %s (%s by %s)",
            meeting.id,
            transition.from_state.label if transition.from_state else "-",
            transition.to_state.label,
            transition.event_type.value,
            actor.user_id,
        )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_meeting(self, request: MeetingCreate) -> MeetingCreationResult:
        """
        Create a single meeting, or one meeting per occurrence of a series.

        Single meetings raise their errors directly. For a series, each
        occurrence is reported as created, excluded or failed, and failed
        dates can be retried by sending the same request with `series_id`
        and `occurrence_dates`.
        """
        ConfirmationPolicy.check_override_reason(request.overrides, request.override_reason)
        tz_name = request.schedule.timezone or self._settings.DEFAULT_TIMEZONE
        resolve_timezone(tz_name)

        board = await self._directory.get_board(request.board_id)
        actor = await self._directory.get_actor(request.created_by)
        roster = await self._directory.list_participants(board.id)

        if request.recurrence is None:
            meeting = await self._create_occurrence(
                request, board, actor, roster, tz_name, request.schedule.scheduled_date, None, None
            )
            return MeetingCreationResult(
                meetings=[meeting],
                occurrences=[
                    OccurrenceResult(
                        position=1,
                        scheduled_date=meeting.scheduled_date,
                        status=OccurrenceStatus.CREATED,
                        meeting=meeting,
                    )
                ],
            )

        return await self._create_series(request, request.recurrence, board, actor, roster, tz_name)

    async def _create_series(
        self,
        request: MeetingCreate,
        pattern: RecurrencePattern,
        board: Board,
        actor: Actor,
        roster: list[Participant],
        tz_name: str,
    ) -> MeetingCreationResult:
        generated = self._recurrence.generate(request.schedule.scheduled_date, pattern)
        occurrences = generated.occurrences

        series_id = request.series_id or str(uuid.uuid4())
        # Read models, not ORM rows: rows expire on the per-occurrence rollbacks.
        # Keyed by generated position: an occurrence may have been rescheduled since.
        existing: dict[int, MeetingRead] = {}
        if request.series_id:
            existing = {
                row.series_position: MeetingRead.model_validate(row)
                for row in await self._meetings.list_series(series_id)
            }

        if request.occurrence_dates is not None:
            wanted = set(request.occurrence_dates)
            known = {o.date for o in occurrences}
            unknown = sorted(wanted - known)
            if unknown:
                raise ValidationError(
                    "occurrence_dates must be dates generated by the recurrence pattern.",
                    unknown_dates=[d.isoformat() for d in unknown],
                )
            occurrences = [o for o in occurrences if o.date in wanted]

        created: list[MeetingRead] = []
        results: list[OccurrenceResult] = []
        for occurrence in occurrences:
            if occurrence.excluded:
                results.append(
                    OccurrenceResult(
                        position=occurrence.position,
                        scheduled_date=occurrence.date,
                        status=OccurrenceStatus.EXCLUDED,
                    )
                )
                continue

            if occurrence.position in existing:
                current = existing[occurrence.position]
                results.append(
                    OccurrenceResult(
                        position=occurrence.position,
                        scheduled_date=current.scheduled_date,
                        status=OccurrenceStatus.CREATED,
                        meeting=current,
                        detail=(
                            "Occurrence was cancelled."
                            if current.status == MeetingStatus.CANCELLED.value
                            else None
                        ),
                    )
                )
                continue

            try:
                meeting = await self._create_occurrence(
                    request,
                    board,
                    actor,
                    roster,
                    tz_name,
                    occurrence.date,
                    series_id,
                    occurrence.position,
                )
            except MeetingEngineError as exc:
                logger.warning(
                    "Series %s: occurrence %d on %s failed: %s",
                    series_id,
                    occurrence.position,
                    occurrence.date,
                    exc.message,
                )
                results.append(
                    OccurrenceResult(
                        position=occurrence.position,
                        scheduled_date=occurrence.date,
                        status=OccurrenceStatus.FAILED,
                        error=type(exc).__name__,
                        detail=exc.message,
                    )
                )
                continue

            created.append(meeting)
            results.append(
                OccurrenceResult(
                    position=occurrence.position,
                    scheduled_date=occurrence.date,
                    status=OccurrenceStatus.CREATED,
                    meeting=meeting,
                )
            )

        logger.info(
            "Series %s: %d created, %d failed, %d excluded%s",
            series_id,
            len(created),
            sum(1 for r in results if r.status == OccurrenceStatus.FAILED),
            sum(1 for r in results if r.status == OccurrenceStatus.EXCLUDED),
            " (truncated)" if generated.truncated else "",
        )
        return MeetingCreationResult(
            series_id=series_id,
            meetings=created,
            occurrences=results,
            truncated=generated.truncated,
        )

    async def _create_occurrence(
        self,
        request: MeetingCreate,
        board: Board,
        actor: Actor,
        roster: list[Participant],
        tz_name: str,
        scheduled_date: date,
        series_id: str | None,
        series_position: int | None,
    ) -> MeetingRead:
        now = self._now()

        async def _run() -> Meeting:
            starts_at = scheduled_start(scheduled_date, request.schedule.start_time, tz_name)
            if starts_at < now:
                raise ValidationError(
                    f"Meeting on {scheduled_date.isoformat()} would start in the past.",
                    scheduled_date=scheduled_date.isoformat(),
                )

            overrides = request.overrides
            requires_confirmation = ConfirmationPolicy.effective_confirmation(
                board, request.meeting_type, overrides, request.override_reason
            )
            quorum_pct = _effective_quorum_percentage(request.quorum_percentage, overrides)
            check = self._check_requirements(
                board, request.meeting_type, request.setup, roster, quorum_pct, overrides
            )
            transition = LifecycleStateMachine.initial_state(check.is_complete)

            meeting = Meeting(
                id=str(uuid.uuid4()),
                board_id=board.id,
                title=request.title,
                meeting_type=request.meeting_type.value,
                location_type=request.location_type.value,
                scheduled_date=scheduled_date,
                start_time=request.schedule.start_time,
                end_time=end_time_for(request.schedule.start_time, request.schedule.duration_minutes),
                duration_minutes=request.schedule.duration_minutes,
                timezone=tz_name,
                quorum_percentage=request.quorum_percentage,
                quorum_required=QuorumCalculator.required_count(roster, quorum_pct),
                requires_confirmation=requires_confirmation,
                overrides=overrides.model_dump() if overrides and overrides.any_set() else None,
                override_reason=request.override_reason,
                agenda_item_count=request.setup.agenda_item_count,
                document_count=request.setup.document_count,
                has_chairman=request.setup.has_chairman,
                has_secretary=request.setup.has_secretary,
                series_id=series_id,
                series_position=series_position,
                created_by=actor.user_id,
                created_at=now,
                updated_at=now,
                status_updated_at=now,
            )
            meeting.state = transition.to_state
            self._meetings.add(meeting)
            await self._session.flush()

            await self._events.append(
                meeting_id=meeting.id,
                payload=MeetingCreatedPayload(
                    board_id=board.id,
                    meeting_type=request.meeting_type.value,
                    title=request.title,
                    requires_confirmation=requires_confirmation,
                    series_id=series_id,
                    series_position=series_position,
                    overrides=overrides if overrides and overrides.any_set() else None,
                    override_reason=request.override_reason,
                    missing_requirements=[issue.code for issue in check.errors],
                ),
                actor=actor,
                performed_at=now,
                transition=transition,
            )

            if request.auto_submit and check.is_complete:
                await self._submit(meeting, board, actor, roster, now, notes=None)
            return meeting

        return await self._commit_or_rollback(_run)

    def _check_requirements(
        self,
        board: Board,
        meeting_type: MeetingType,
        setup: MeetingSetup,
        roster: Sequence[Participant],
        quorum_pct: float,
        overrides: MeetingOverrides | None,
    ) -> RequirementsCheck:
        requirements = RequirementsValidator.merge(board, meeting_type, overrides)
        return RequirementsValidator.validate(requirements, setup, roster, quorum_pct, overrides)

    # ------------------------------------------------------------------
    # Approval workflow
    # ------------------------------------------------------------------

    async def _submit(
        self,
        meeting: Meeting,
        board: Board,
        actor: Actor,
        roster: Sequence[Participant],
        now: datetime,
        notes: str | None,
    ) -> None:
        overrides = _stored_overrides(meeting)
        requires_confirmation = ConfirmationPolicy.effective_confirmation(
            board, MeetingType(meeting.meeting_type), overrides, meeting.override_reason
        )
        transition = LifecycleStateMachine.submit(_state(meeting), requires_confirmation)

        meeting.requires_confirmation = requires_confirmation
        meeting.quorum_required = QuorumCalculator.required_count(
            roster, _effective_quorum_percentage(meeting.quorum_percentage, overrides)
        )

        if transition.event_type == MeetingEventType.SUBMITTED_FOR_APPROVAL:
            payload: EventPayload = SubmittedForApprovalPayload(
                approver_role=ConfirmationPolicy.approver_role_for(board),
                notes=notes,
            )
            await self._record(meeting, transition, payload, actor, now)
        else:
            await self._record(
                meeting, transition, self._system_approval(overrides, meeting), SYSTEM_ACTOR, now
            )

    @staticmethod
    def _system_approval(overrides: MeetingOverrides | None, meeting: Meeting) -> ApprovedPayload:
        skipped = bool(overrides and overrides.skip_approval)
        return ApprovedPayload(
            system_approved=True,
            skip_approval_override=skipped,
            override_reason=meeting.override_reason if skipped else None,
        )

    async def submit(self, meeting_id: str, actor_id: str, notes: str | None = None) -> MeetingRead:
        async def work(meeting: Meeting, now: datetime) -> None:
            board = await self._directory.get_board(meeting.board_id)
            actor = await self._directory.get_actor(actor_id)
            roster = await self._directory.list_participants(meeting.board_id)
            await self._submit(meeting, board, actor, roster, now, notes)

        return await self._mutate(meeting_id, work)

    async def approve(
        self, meeting_id: str, approver_id: str, signature_id: str | None = None
    ) -> MeetingRead:
        async def work(meeting: Meeting, now: datetime) -> None:
            transition = LifecycleStateMachine.approve(_state(meeting))
            board = await self._directory.get_board(meeting.board_id)
            approver = await self._directory.get_actor(approver_id)
            role = ConfirmationPolicy.authorize_approver(approver, board)
            await self._record(
                meeting,
                transition,
                ApprovedPayload(approver_role=role, signature_id=signature_id),
                approver,
                now,
            )

        return await self._mutate(meeting_id, work)

    async def reject(
        self,
        meeting_id: str,
        approver_id: str,
        reason: str,
        comments: str | None = None,
    ) -> MeetingRead:
        async def work(meeting: Meeting, now: datetime) -> None:
            transition = LifecycleStateMachine.reject(_state(meeting), reason)
            board = await self._directory.get_board(meeting.board_id)
            approver = await self._directory.get_actor(approver_id)
            ConfirmationPolicy.authorize_approver(approver, board)
            await self._record(
                meeting,
                transition,
                RejectedPayload(rejection_reason=reason.strip(), comments=comments),
                approver,
                now,
            )

        return await self._mutate(meeting_id, work)

    async def resubmit(self, meeting_id: str, actor_id: str, notes: str | None = None) -> MeetingRead:
        async def work(meeting: Meeting, now: datetime) -> None:
            transition = LifecycleStateMachine.resubmit(_state(meeting))
            board = await self._directory.get_board(meeting.board_id)
            actor = await self._directory.get_actor(actor_id)
            overrides = _stored_overrides(meeting)
            requires_confirmation = ConfirmationPolicy.effective_confirmation(
                board, MeetingType(meeting.meeting_type), overrides, meeting.override_reason
            )
            meeting.requires_confirmation = requires_confirmation

            await self._record(
                meeting,
                transition,
                ResubmittedPayload(requires_confirmation=requires_confirmation, notes=notes),
                actor,
                now,
            )
            if not requires_confirmation:
                await self._record(
                    meeting,
                    LifecycleStateMachine.approve(_state(meeting)),
                    self._system_approval(overrides, meeting),
                    SYSTEM_ACTOR,
                    now,
                )

        return await self._mutate(meeting_id, work)

    # ------------------------------------------------------------------
    # Meeting day and afterwards
    # ------------------------------------------------------------------

    async def start(self, meeting_id: str, actor_id: str) -> MeetingRead:
        async def work(meeting: Meeting, now: datetime) -> None:
            starts_at = scheduled_start(meeting.scheduled_date, meeting.start_time, meeting.timezone)
            transition = LifecycleStateMachine.start(
                _state(meeting), now, starts_at, self._settings.ENFORCE_START_TIME
            )
            actor = await self._directory.get_actor(actor_id)
            roster = await self._directory.list_participants(meeting.board_id)
            quorum_required = QuorumCalculator.required_count(
                roster,
                _effective_quorum_percentage(meeting.quorum_percentage, _stored_overrides(meeting)),
            )
            meeting.quorum_required = quorum_required
            meeting.started_at = now
            await self._record(
                meeting,
                transition,
                MeetingStartedPayload(quorum_required=quorum_required, started_early=now < starts_at),
                actor,
                now,
            )

        return await self._mutate(meeting_id, work)

    async def end(self, meeting_id: str, actor_id: str) -> MeetingRead:
        async def work(meeting: Meeting, now: datetime) -> None:
            transition = LifecycleStateMachine.end(_state(meeting))
            actor = await self._directory.get_actor(actor_id)
            duration = None
            if meeting.started_at is not None:
                duration = round((now - _as_utc(meeting.started_at)).total_seconds() / 60, 2)
            meeting.ended_at = now
            await self._record(
                meeting, transition, MeetingEndedPayload(duration_minutes=duration), actor, now
            )

        return await self._mutate(meeting_id, work)

    async def archive(self, meeting_id: str, actor_id: str) -> MeetingRead:
        async def work(meeting: Meeting, now: datetime) -> None:
            transition = LifecycleStateMachine.archive(_state(meeting))
            actor = await self._directory.get_actor(actor_id)
            await self._record(meeting, transition, ArchivedPayload(), actor, now)

        return await self._mutate(meeting_id, work)

    async def archive_due(self, now: datetime | None = None) -> ArchiveRunResult:
        """
        Archive every `completed.recent` meeting whose retention window has passed.

        Each meeting is archived in its own transaction; a failure is logged
        and the run moves on.
        """
        retention_days = self._settings.ARCHIVE_RETENTION_DAYS
        cutoff = _as_utc(now) if now is not None else self._now()
        cutoff = cutoff - timedelta(days=retention_days)

        due = list(await self._meetings.list_due_for_archive(cutoff))
        # Release the read transaction before the per-meeting writes.
        await self._session.rollback()

        result = ArchiveRunResult(cutoff=cutoff, retention_days=retention_days)
        for meeting_id in due:

            async def work(meeting: Meeting, at: datetime) -> None:
                transition = LifecycleStateMachine.archive(_state(meeting))
                await self._record(
                    meeting,
                    transition,
                    ArchivedPayload(retention_days=retention_days, automatic=True),
                    SYSTEM_ACTOR,
                    at,
                )

            try:
                await self._mutate(meeting_id, work)
            except MeetingEngineError as exc:
                logger.warning("Archive of meeting %s failed: %s", meeting_id, exc.message)
                result.failed_ids.append(meeting_id)
                continue
            result.archived_ids.append(meeting_id)

        logger.info(
            "Archive run (cutoff %s): %d archived, %d failed",
            cutoff.isoformat(),
            len(result.archived_ids),
            len(result.failed_ids),
        )
        return result

    async def cancel(self, meeting_id: str, actor_id: str, reason: str) -> MeetingRead:
        async def work(meeting: Meeting, now: datetime) -> None:
            transition = LifecycleStateMachine.cancel(_state(meeting), reason)
            actor = await self._directory.get_actor(actor_id)
            meeting.cancelled_by = actor.user_id
            meeting.cancelled_at = now
            meeting.cancellation_reason = reason.strip()
            await self._record(
                meeting, transition, CancelledPayload(reason=reason.strip()), actor, now
            )

        return await self._mutate(meeting_id, work)

    # ------------------------------------------------------------------
    # Edits before the meeting
    # ------------------------------------------------------------------

    async def reschedule(
        self,
        meeting_id: str,
        actor_id: str,
        scheduled_date: date,
        start_time: time,
        duration_minutes: int | None = None,
    ) -> MeetingRead:
        """
        Move a meeting. An approved meeting that needs confirmation goes back
        to pending approval.
        """

        async def work(meeting: Meeting, now: datetime) -> None:
            transition = LifecycleStateMachine.reschedule(
                _state(meeting), meeting.requires_confirmation
            )
            if scheduled_start(scheduled_date, start_time, meeting.timezone) < now:
                raise ValidationError(
                    "A meeting cannot be rescheduled into the past.",
                    scheduled_date=scheduled_date.isoformat(),
                )
            actor = await self._directory.get_actor(actor_id)

            previous_date, previous_start = meeting.scheduled_date, meeting.start_time
            duration = duration_minutes or meeting.duration_minutes
            meeting.scheduled_date = scheduled_date
            meeting.start_time = start_time
            meeting.duration_minutes = duration
            meeting.end_time = end_time_for(start_time, duration)

            await self._record(
                meeting,
                transition,
                SchedulePayload(
                    event_type="rescheduled",
                    previous_date=previous_date,
                    previous_start_time=previous_start,
                    scheduled_date=scheduled_date,
                    start_time=start_time,
                    duration_minutes=duration,
                    reconfirmation_required=transition.changes_state,
                ),
                actor,
                now,
            )

        return await self._mutate(meeting_id, work)

    async def update_setup(self, meeting_id: str, actor_id: str, setup: MeetingSetup) -> MeetingRead:
        """
        Record new setup facts for a draft and move it between
        `draft.incomplete` and `draft.complete` accordingly.
        """

        async def work(meeting: Meeting, now: datetime) -> None:
            LifecycleStateMachine.complete_setup(_state(meeting), True)  # draft guard
            board = await self._directory.get_board(meeting.board_id)
            actor = await self._directory.get_actor(actor_id)
            roster = await self._directory.list_participants(meeting.board_id)
            overrides = _stored_overrides(meeting)
            quorum_pct = _effective_quorum_percentage(meeting.quorum_percentage, overrides)

            meeting.agenda_item_count = setup.agenda_item_count
            meeting.document_count = setup.document_count
            meeting.has_chairman = setup.has_chairman
            meeting.has_secretary = setup.has_secretary
            meeting.quorum_required = QuorumCalculator.required_count(roster, quorum_pct)
            meeting.updated_at = now

            check = self._check_requirements(
                board, MeetingType(meeting.meeting_type), setup, roster, quorum_pct, overrides
            )
            transition = LifecycleStateMachine.complete_setup(_state(meeting), check.is_complete)
            if transition is None:
                return
            await self._record(
                meeting,
                transition,
                ConfigurationCompletePayload(
                    complete=check.is_complete,
                    missing_requirements=[issue.code for issue in check.errors],
                    waived_requirements=check.waived,
                ),
                actor,
                now,
            )

        return await self._mutate(meeting_id, work)

    async def record_event(
        self, meeting_id: str, actor_id: str, payload: EventPayload
    ) -> MeetingEventRead:
        """
        Add a non-status event (attendance, votes, minutes...) to the audit trail.
        """
        if MeetingEventType(payload.event_type) in LIFECYCLE_EVENT_TYPES:
            raise ValidationError(
                f"'{payload.event_type}' events are produced by lifecycle actions only.",
                event_type=payload.event_type,
            )
        now = self._now()
        try:
            await self._meetings.get(meeting_id)
            actor = await self._directory.get_actor(actor_id)
            event = await self._events.append(
                meeting_id=meeting_id, payload=payload, actor=actor, performed_at=now
            )
            read = MeetingEventRead.model_validate(event)
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ConcurrencyError("Concurrent event append; retry.") from exc
        except Exception:
            await self._session.rollback()
            raise
        return read

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_meeting(self, meeting_id: str) -> MeetingRead:
        return MeetingRead.model_validate(await self._meetings.get(meeting_id))

    async def list_series(self, series_id: str) -> list[MeetingRead]:
        rows = await self._meetings.list_series(series_id)
        return [MeetingRead.model_validate(row) for row in rows]

    async def get_events(self, meeting_id: str) -> list[MeetingEventRead]:
        await self._meetings.get(meeting_id)
        return await self._events.list_for_meeting(meeting_id)

    async def get_quorum(self, meeting_id: str) -> QuorumSummary:
        meeting = await self._meetings.get(meeting_id)
        roster = await self._directory.list_participants(meeting.board_id)
        pct = _effective_quorum_percentage(meeting.quorum_percentage, _stored_overrides(meeting))
        return QuorumCalculator.summarize(roster, pct)

    async def get_confirmation(self, meeting_id: str) -> ConfirmationDisplay:
        meeting = await self._meetings.get(meeting_id)
        board = await self._directory.get_board(meeting.board_id)
        events = await self._events.list_for_meeting(meeting_id)
        return ConfirmationPolicy.confirmation_display(
            state=_state(meeting),
            requires_confirmation=meeting.requires_confirmation,
            approver_role=ConfirmationPolicy.approver_role_for(board),
            prepared_by=meeting.created_by,
            prepared_at=meeting.created_at,
            events=events,
        )
