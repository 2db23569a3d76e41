"""Derived views: pure filter and sort functions over canonical collections.

Nothing here mutates its input. Sorting is stable, so rows with equal keys
keep their canonical (insertion) order in both directions.
"""

from __future__ import annotations

import datetime as dt
import locale
import unicodedata
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from tracker.models import Game, GameStatus, LastPlayedEntry, PlayRecord

T = TypeVar("T")

EPOCH = dt.date(1970, 1, 1)


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortState:
    column: str
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction == SortDirection.DESC

    def toggle(self, column: str) -> SortState:
        """Same column flips the direction; a new column starts ascending."""
        if column == self.column:
            flipped = SortDirection.ASC if self.descending else SortDirection.DESC
            return replace(self, direction=flipped)
        return SortState(column=column)


@dataclass(frozen=True)
class Column(Generic[T]):
    key: Callable[[T], Any]
    # a None key marks the row as absent; absent rows go last in both directions
    absent_last: bool = False


def fold_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def text_key(value: str | None) -> tuple[str, str]:
    """Case-insensitive collation key, compared on base letters first.

    Accents only break ties, so "Éclipse" sorts among the E names whatever
    LC_COLLATE is; within that, ordering follows the active collation locale.
    """
    text = (value or "").casefold()
    return locale.strxfrm(fold_accents(text)), locale.strxfrm(text)


def use_system_collation() -> str | None:
    """Adopt LC_COLLATE from the environment. None when the locale is not installed."""
    try:
        return locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        return None


def sort_items(items: Iterable[T], columns: Mapping[str, Column[T]], state: SortState) -> list[T]:
    column = columns.get(state.column)
    if column is None:
        raise ValueError(f"Unknown sort column: {state.column}")

    rows = list(items)
    if not column.absent_last:
        return sorted(rows, key=column.key, reverse=state.descending)

    present = [row for row in rows if column.key(row) is not None]
    absent = [row for row in rows if column.key(row) is None]
    return sorted(present, key=column.key, reverse=state.descending) + absent


def contains_text(needle: str, *fields: str | None) -> bool:
    return any(field is not None and needle in field.lower() for field in fields)


def filter_games(games: Iterable[Game], text: str = "", status: GameStatus | None = None) -> list[Game]:
    """Substring match on name and status, ANDed with an exact status match."""
    needle = text.strip().lower()
    result = []
    for game in games:
        if needle and not contains_text(needle, game.name, game.status):
            continue
        if status is not None and game.status != status:
            continue
        result.append(game)
    return result


def filter_plays(plays: Iterable[PlayRecord], text: str = "") -> list[PlayRecord]:
    """Substring match on game name, winner, comment and every player name."""
    needle = text.strip().lower()
    if not needle:
        return list(plays)
    return [
        play
        for play in plays
        if contains_text(needle, play.game_name, play.winner, play.comment, *play.players)
    ]


GAME_COLUMNS: dict[str, Column[Game]] = {
    "name": Column(lambda g: text_key(g.name)),
    "status": Column(lambda g: text_key(g.status)),
    "ranking": Column(lambda g: g.ranking, absent_last=True),
    "complexity": Column(lambda g: g.complexity, absent_last=True),
    "times_played": Column(lambda g: g.times_played),
    "last_played": Column(lambda g: g.last_played or EPOCH),
}

PLAY_COLUMNS: dict[str, Column[PlayRecord]] = {
    "date": Column(lambda p: p.date),
    "game_name": Column(lambda p: text_key(p.game_name)),
    "players": Column(lambda p: len(p.players)),
    "winner": Column(lambda p: text_key(p.winner)),
}

LAST_PLAYED_COLUMNS: dict[str, Column[LastPlayedEntry]] = {
    "elapsed_days": Column(lambda e: e.elapsed_days, absent_last=True),
    "name": Column(lambda e: text_key(e.name)),
    "times_played": Column(lambda e: e.times_played),
}

DEFAULT_GAME_SORT = SortState("name")
DEFAULT_PLAY_SORT = SortState("date", SortDirection.DESC)
DEFAULT_LAST_PLAYED_SORT = SortState("elapsed_days", SortDirection.DESC)
