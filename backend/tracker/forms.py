"""Add-game and record-play forms.

A form keeps its draft fields between submissions. Validation runs before
any network call and reports through the form's own ``error``; problems
from the upstream go to the shared error channel via the store.
"""

from __future__ import annotations

import datetime as dt
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

import structlog

from tracker.models import PlayDraft

if TYPE_CHECKING:
    from collections.abc import Callable

    from tracker.stores import GamesStore, PlaysStore

logger = structlog.get_logger()

T = TypeVar("T")


class FormValidationError(Exception):
    """A draft field failed a local precondition."""


def parse_players(value: str) -> list[str]:
    return [name.strip() for name in value.split(",") if name.strip()]


class Form(ABC, Generic[T]):
    def __init__(self) -> None:
        self.submitting = False
        self.error: str | None = None

    @abstractmethod
    def validate(self) -> T: ...

    @abstractmethod
    async def _send(self, validated: T) -> bool: ...

    @abstractmethod
    def reset(self) -> None: ...

    async def submit(self) -> bool:
        """Validate and send the draft.

        Returns False without side effects while a previous submission is
        still in flight. Drafts are reset only after a successful send.
        """
        if self.submitting:
            return False
        self.error = None
        try:
            validated = self.validate()
        except FormValidationError as e:
            self.error = str(e)
            logger.debug("form rejected", form=type(self).__name__, error=self.error)
            return False

        self.submitting = True
        try:
            sent = await self._send(validated)
        finally:
            self.submitting = False
        if sent:
            self.reset()
        return sent


class AddGameForm(Form[int]):
    def __init__(self, games: GamesStore) -> None:
        super().__init__()
        self._games = games
        self.external_id = ""

    def validate(self) -> int:
        raw = self.external_id.strip()
        if not raw:
            raise FormValidationError("BGG ID is required")
        try:
            external_id = int(raw)
        except ValueError:
            raise FormValidationError("Valid BGG ID is required") from None
        if external_id <= 0:
            raise FormValidationError("Valid BGG ID is required")
        return external_id

    async def _send(self, validated: int) -> bool:
        return await self._games.add(validated)

    def reset(self) -> None:
        self.external_id = ""


class RecordPlayForm(Form[PlayDraft]):
    def __init__(self, plays: PlaysStore, today: Callable[[], dt.date] = dt.date.today) -> None:
        super().__init__()
        self._plays = plays
        self._today = today
        self.reset()

    def validate(self) -> PlayDraft:
        game_id = self.game_id.strip()
        if not game_id:
            raise FormValidationError("Game is required")
        if not self.date.strip():
            raise FormValidationError("Date is required")
        try:
            played_on = dt.date.fromisoformat(self.date.strip())
        except ValueError:
            raise FormValidationError("Date must be in YYYY-MM-DD format") from None
        if not self.players.strip():
            raise FormValidationError("Players are required")
        players = parse_players(self.players)
        if not players:
            raise FormValidationError("At least one player is required")
        return PlayDraft(
            game_id=game_id,
            date=played_on,
            players=players,
            winner=self.winner.strip() or None,
            scores=self.scores.strip() or None,
            comment=self.comment.strip() or None,
        )

    async def _send(self, validated: PlayDraft) -> bool:
        return await self._plays.record(validated)

    def reset(self) -> None:
        self.game_id = ""
        self.date = self._today().isoformat()
        self.players = ""
        self.winner = ""
        self.scores = ""
        self.comment = ""
