# board_meetings/services/quorum.py
from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import ROUND_CEILING, Decimal

from board_meetings.schemas.participant import Participant, QuorumSummary


class QuorumCalculator:
    """
    Quorum math over a participant roster.

    Rules
    -----
    - Guests never count, neither towards the roster size nor towards presence.
    - required = ceil(non_guest_count * percentage / 100), computed with
      Decimal so 50% of 7 is exactly 4 and never 3.
    """

    @staticmethod
    def _non_guest_count(participants: Iterable[Participant]) -> int:
        return sum(1 for p in participants if not p.is_guest)

    @staticmethod
    def required_count(participants: Sequence[Participant], quorum_percentage: float) -> int:
        non_guest = QuorumCalculator._non_guest_count(participants)
        # str() keeps the literal decimal value of the float
        pct = Decimal(str(quorum_percentage))
        raw = Decimal(non_guest) * pct / Decimal(100)
        return int(raw.to_integral_value(rounding=ROUND_CEILING))

    @staticmethod
    def can_meet_quorum(participants: Sequence[Participant], quorum_percentage: float) -> bool:
        non_guest = QuorumCalculator._non_guest_count(participants)
        return non_guest >= QuorumCalculator.required_count(participants, quorum_percentage)

    @staticmethod
    def summarize(participants: Sequence[Participant], quorum_percentage: float) -> QuorumSummary:
        non_guest = QuorumCalculator._non_guest_count(participants)
        required = QuorumCalculator.required_count(participants, quorum_percentage)
        return QuorumSummary(
            participant_count=len(participants),
            guest_count=len(participants) - non_guest,
            non_guest_count=non_guest,
            quorum_percentage=quorum_percentage,
            required_count=required,
            can_meet_quorum=non_guest >= required,
        )

    @staticmethod
    def is_quorate(
        present: Iterable[Participant],
        roster: Sequence[Participant],
        quorum_percentage: float,
    ) -> bool:
        """
        Whether the non-guests in `present` reach the roster's required count.
        """
        roster_ids = {p.user_id for p in roster if not p.is_guest}
        present_members = {p.user_id for p in present if not p.is_guest and p.user_id in roster_ids}
        return len(present_members) >= QuorumCalculator.required_count(roster, quorum_percentage)
