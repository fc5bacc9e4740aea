"""
Directory provider interface.

The engine does not own boards, rosters or user profiles; it reads them
from a directory service through this contract.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from board_meetings.core.exceptions import NotFoundError
from board_meetings.schemas.board import Board
from board_meetings.schemas.participant import Actor, Participant


class DirectoryProvider(ABC):
    """Read-only access to boards, participant rosters and actors."""

    @abstractmethod
    async def get_board(self, board_id: str) -> Board:
        """Get a board with its settings. Raises NotFoundError if unknown."""
        pass

    @abstractmethod
    async def list_participants(self, board_id: str) -> list[Participant]:
        """Current participant roster of a board, guests included."""
        pass

    @abstractmethod
    async def get_actor(self, user_id: str) -> Actor:
        """Get a user with the role codes they hold. Raises NotFoundError if unknown."""
        pass


class InMemoryDirectory(DirectoryProvider):
    """
    Dictionary-backed directory used for local runs and tests.

    Rosters are returned as copies, so callers always see the latest
    registration (guest status included) and cannot mutate the store.
    """

    def __init__(
        self,
        boards: list[Board] | None = None,
        participants: dict[str, list[Participant]] | None = None,
        actors: list[Actor] | None = None,
    ) -> None:
        self._boards: dict[str, Board] = {b.id: b for b in boards or []}
        self._participants: dict[str, list[Participant]] = {
            board_id: list(roster) for board_id, roster in (participants or {}).items()
        }
        self._actors: dict[str, Actor] = {a.user_id: a for a in actors or []}

    def add_board(self, board: Board, participants: list[Participant] | None = None) -> None:
        self._boards[board.id] = board
        if participants is not None:
            self._participants[board.id] = list(participants)

    def set_participants(self, board_id: str, participants: list[Participant]) -> None:
        self._participants[board_id] = list(participants)

    def add_actor(self, actor: Actor) -> None:
        self._actors[actor.user_id] = actor

    async def get_board(self, board_id: str) -> Board:
        board = self._boards.get(board_id)
        if board is None:
            raise NotFoundError(f"Board {board_id} not found.", board_id=board_id)
        return board

    async def list_participants(self, board_id: str) -> list[Participant]:
        if board_id not in self._boards:
            raise NotFoundError(f"Board {board_id} not found.", board_id=board_id)
        return [p.model_copy() for p in self._participants.get(board_id, [])]

    async def get_actor(self, user_id: str) -> Actor:
        actor = self._actors.get(user_id)
        if actor is None:
            raise NotFoundError(f"User {user_id} not found.", user_id=user_id)
        return actor
