"""Reshape upstream payloads into canonical entities.

Each payload kind has an ordered list of shape parsers. A parser returns the
value it recognised or None for "not this shape"; the first hit wins. The
``parse_*`` functions return None when no shape matched (callers report that
as a malformed response), ``normalize_*`` fall back to the empty default.
Nothing here raises on bad input: records that fail validation are skipped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from tracker.models import (
    DRAW,
    Game,
    GameStatEntry,
    LastPlayedEntry,
    PlayerStats,
    PlayRecord,
    TotalStatEntry,
    WinStatEntry,
    coerce_id,
    safe_rate,
)

if TYPE_CHECKING:
    import datetime as dt
    from collections.abc import Callable, Iterable, Sequence

logger = structlog.get_logger()

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


def first_match(payload: Any, parsers: Iterable[Callable[[Any], T | None]]) -> T | None:  # noqa: ANN401
    for parser in parsers:
        result = parser(payload)
        if result is not None:
            return result
    return None


def bare_list(payload: Any) -> list[Any] | None:  # noqa: ANN401
    return payload if isinstance(payload, list) else None


def list_under(*path: str) -> Callable[[Any], list[Any] | None]:
    """Parser for a list nested under the given chain of object keys."""

    def parse(payload: Any) -> list[Any] | None:  # noqa: ANN401
        node = payload
        for key in path:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node if isinstance(node, list) else None

    return parse


def object_under(*path: str) -> Callable[[Any], dict[str, Any] | None]:
    def parse(payload: Any) -> dict[str, Any] | None:  # noqa: ANN401
        node = payload
        for key in path:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node if isinstance(node, dict) else None

    return parse


GAME_LIST_SHAPES = (bare_list, list_under("games"), list_under("data"), list_under("data", "games"))
PLAY_LIST_SHAPES = (bare_list, list_under("plays"), list_under("data"), list_under("data", "plays"))
WIN_STAT_SHAPES = (bare_list, list_under("stats"), list_under("data"), list_under("data", "stats"))
TOTAL_LIST_SHAPES = (bare_list, list_under("totals"), list_under("data", "totals"))
LAST_PLAYED_SHAPES = (bare_list, list_under("data"), list_under("games"))
GAME_STAT_SHAPES = (bare_list, list_under("games"), list_under("data"), list_under("data", "games"))


def _validate_items(items: Iterable[Any], model: type[M]) -> list[M]:
    valid: list[M] = []
    for item in items:
        try:
            valid.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning("skipping invalid record", model=model.__name__, errors=e.error_count())
    return valid


def _as_int(value: Any) -> int | None:  # noqa: ANN401
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (float, str)):
        try:
            return int(value)
        except (ValueError, OverflowError):
            return None
    return None


def _first_int(record: dict[str, Any], keys: Sequence[str]) -> int | None:
    for key in keys:
        number = _as_int(record.get(key))
        if number is not None:
            return number
    return None


# games and plays


def parse_games(payload: Any) -> list[Game] | None:  # noqa: ANN401
    items = first_match(payload, GAME_LIST_SHAPES)
    return None if items is None else _validate_items(items, Game)


def normalize_games(payload: Any) -> list[Game]:  # noqa: ANN401
    return parse_games(payload) or []


def parse_plays(payload: Any) -> list[PlayRecord] | None:  # noqa: ANN401
    items = first_match(payload, PLAY_LIST_SHAPES)
    return None if items is None else _validate_items(items, PlayRecord)


def normalize_plays(payload: Any) -> list[PlayRecord]:  # noqa: ANN401
    return parse_plays(payload) or []


# win statistics


def _nested_wins(record: dict[str, Any]) -> dict[str, Any] | None:
    wins = record.get("wins")
    return wins if isinstance(wins, dict) else None


def _flat_wins(record: dict[str, Any]) -> dict[str, Any]:
    return record


def _lift_win_record(record: Any, buckets: Sequence[str]) -> WinStatEntry | None:  # noqa: ANN401
    if not isinstance(record, dict):
        return None
    game_name = record.get("gameName") or record.get("name")
    if not isinstance(game_name, str) or not game_name.strip():
        return None

    source = first_match(record, (_nested_wins, _flat_wins))
    wins: dict[str, int] = {}
    for bucket in buckets:
        count = _first_int(source, (bucket, bucket.lower()))
        wins[bucket] = count if count is not None and count > 0 else 0

    total = _first_int(record, ("totalGames", "totalPlays", "total_plays", "total"))
    if total is None:
        total = sum(wins.values())

    game_id = coerce_id(record.get("gameId", record.get("id", "")))
    return WinStatEntry(
        game_id=str(game_id) if game_id is not None else "",
        game_name=game_name.strip(),
        total_plays=max(total, 0),
        wins=wins,
    )


def parse_win_stats(
    payload: Any,  # noqa: ANN401
    participants: Sequence[str],
    draw_label: str = DRAW,
) -> list[WinStatEntry] | None:
    """Lift flat per-participant counts into the ``wins`` mapping.

    Buckets are the participants followed by the draw label; a bucket absent
    from the record counts 0.
    """
    records = first_match(payload, WIN_STAT_SHAPES)
    if records is None:
        return None
    buckets = [*participants, draw_label]
    entries = []
    for record in records:
        entry = _lift_win_record(record, buckets)
        if entry is None:
            logger.warning("skipping invalid win stat record")
            continue
        entries.append(entry)
    return entries


def normalize_win_stats(
    payload: Any,  # noqa: ANN401
    participants: Sequence[str],
    draw_label: str = DRAW,
) -> list[WinStatEntry]:
    return parse_win_stats(payload, participants, draw_label) or []


# total statistics


def _totals_from_map(payload: Any) -> list[TotalStatEntry] | None:  # noqa: ANN401
    """``{totalGames, players: {name: wins}}`` with one shared denominator."""
    body = first_match(payload, (object_under("data"), object_under()))
    if body is None or not isinstance(body.get("players"), dict):
        return None
    total = _first_int(body, ("totalGames", "totalPlays", "total")) or 0
    entries = []
    for name, raw_wins in body["players"].items():
        wins = _as_int(raw_wins) or 0
        entries.append(
            TotalStatEntry(participant=str(name), wins=wins, total_plays=total, win_rate=safe_rate(wins, total)),
        )
    return entries


def _totals_from_list(payload: Any) -> list[TotalStatEntry] | None:  # noqa: ANN401
    """``{totals: [{player, wins, plays}]}``, each row with its own play count."""
    rows = first_match(payload, TOTAL_LIST_SHAPES)
    if rows is None:
        return None
    entries = []
    for row in rows:
        if not isinstance(row, dict) or not row.get("player"):
            logger.warning("skipping invalid total stat record")
            continue
        wins = _as_int(row.get("wins")) or 0
        plays = _first_int(row, ("plays", "totalPlays", "totalGames")) or 0
        entries.append(
            TotalStatEntry(participant=str(row["player"]), wins=wins, total_plays=plays, win_rate=safe_rate(wins, plays)),
        )
    return entries


def parse_total_stats(payload: Any) -> list[TotalStatEntry] | None:  # noqa: ANN401
    return first_match(payload, (_totals_from_map, _totals_from_list))


def normalize_total_stats(payload: Any) -> list[TotalStatEntry]:  # noqa: ANN401
    return parse_total_stats(payload) or []


# last played


def parse_last_played(payload: Any, today: dt.date) -> list[LastPlayedEntry] | None:  # noqa: ANN401
    items = first_match(payload, LAST_PLAYED_SHAPES)
    if items is None:
        return None
    entries = []
    for game in _validate_items(items, Game):
        elapsed = (today - game.last_played).days if game.last_played is not None else None
        entries.append(LastPlayedEntry(game=game, elapsed_days=elapsed, times_played=game.times_played))
    return entries


def normalize_last_played(payload: Any, today: dt.date) -> list[LastPlayedEntry]:  # noqa: ANN401
    return parse_last_played(payload, today) or []


# supplementary statistics


def parse_recent_plays(payload: Any) -> list[PlayRecord] | None:  # noqa: ANN401
    return parse_plays(payload)


def parse_game_stats(payload: Any) -> list[GameStatEntry] | None:  # noqa: ANN401
    items = first_match(payload, GAME_STAT_SHAPES)
    return None if items is None else _validate_items(items, GameStatEntry)


def parse_player_stats(payload: Any) -> PlayerStats | None:  # noqa: ANN401
    body = first_match(payload, (object_under("data"), object_under()))
    if body is None or "player" not in body:
        return None
    valid = _validate_items([body], PlayerStats)
    return valid[0] if valid else None
