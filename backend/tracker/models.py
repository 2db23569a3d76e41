"""Canonical entities held by the stores and rendered by the dashboard.

Upstream payloads use camelCase keys and are inconsistent about a few of
them (gameName vs name, notes vs comment); validation aliases absorb that so
the normalizer only has to find the list.
"""

from __future__ import annotations

import datetime as dt
from enum import StrEnum
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, BeforeValidator, Field, field_validator

DRAW = "Draw"


class GameStatus(StrEnum):
    PLAYING = "Playing"
    INBOX = "Inbox"
    EVALUATING = "Evaluating"
    OWNED = "Owned"
    WISHLIST = "Wishlist"


def coerce_id(value: Any) -> Any:  # noqa: ANN401
    """Upstream ids are sometimes numbers; ours are opaque strings."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def parse_date(value: Any) -> dt.date | None:  # noqa: ANN401
    """Accept a date, a datetime, or an ISO string with or without a time part."""
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if "T" in text or " " in text:
            return dt.datetime.fromisoformat(text).date()
        return dt.date.fromisoformat(text)
    raise ValueError(f"Unsupported date value: {value!r}")


def _lenient_date(value: Any) -> dt.date | None:  # noqa: ANN401
    try:
        return parse_date(value)
    except ValueError:
        return None


def _positive(cast: type[int] | type[float]):  # noqa: ANN202
    def validate(value: Any) -> int | float | None:  # noqa: ANN401
        if value is None or value == "" or isinstance(value, bool):
            return None
        try:
            number = cast(value)
        except (TypeError, ValueError, OverflowError):
            return None
        return number if number > 0 else None

    return validate


OpaqueId = Annotated[str, BeforeValidator(coerce_id)]
LenientDate = Annotated[dt.date | None, BeforeValidator(_lenient_date)]
PositiveInt = Annotated[int | None, BeforeValidator(_positive(int))]
# BGG reports a weight of 0 for games nobody has rated yet
PositiveFloat = Annotated[float | None, BeforeValidator(_positive(float))]


class Game(BaseModel, frozen=True):
    id: OpaqueId = Field(validation_alias=AliasChoices("id", "gameId", "game_id"))
    name: str = Field(validation_alias=AliasChoices("name", "gameName", "game_name"))
    status: GameStatus | None = None
    ranking: PositiveInt = None  # None = unranked
    complexity: PositiveFloat = None
    times_played: int = Field(default=0, ge=0, validation_alias=AliasChoices("timesPlayed", "times_played", "games"))
    last_played: LenientDate = Field(default=None, validation_alias=AliasChoices("lastPlayed", "last_played"))
    external_id: PositiveInt = Field(default=None, validation_alias=AliasChoices("bggId", "externalId", "external_id"))
    notes: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: dt.datetime | None = Field(default=None, validation_alias=AliasChoices("createdAt", "created_at"))
    updated_at: dt.datetime | None = Field(default=None, validation_alias=AliasChoices("updatedAt", "updated_at"))

    @field_validator("name")
    @classmethod
    def _non_empty_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Game name must not be empty")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, v: Any) -> GameStatus | None:  # noqa: ANN401
        if not isinstance(v, str):
            return None
        wanted = v.strip().lower()
        for status in GameStatus:
            if status.value.lower() == wanted:
                return status
        return None

    @field_validator("times_played", mode="before")
    @classmethod
    def _default_times_played(cls, v: Any) -> Any:  # noqa: ANN401
        return 0 if v is None else v

    @field_validator("notes", mode="before")
    @classmethod
    def _default_notes(cls, v: Any) -> Any:  # noqa: ANN401
        return "" if v is None else v

    @field_validator("data", mode="before")
    @classmethod
    def _default_data(cls, v: Any) -> Any:  # noqa: ANN401
        return v if isinstance(v, dict) else {}


class PlayRecord(BaseModel, frozen=True):
    id: OpaqueId = Field(validation_alias=AliasChoices("id", "playId", "play_id"))
    game_id: OpaqueId = Field(validation_alias=AliasChoices("gameId", "game_id"))
    game_name: str | None = Field(default=None, validation_alias=AliasChoices("gameName", "game_name", "name"))
    date: dt.date
    players: list[str] = Field(default_factory=list)
    winner: str | None = None  # None = not recorded; DRAW is an explicit result
    scores: str | None = None
    comment: str | None = Field(default=None, validation_alias=AliasChoices("comment", "notes"))
    created_at: dt.datetime | None = Field(default=None, validation_alias=AliasChoices("createdAt", "created_at"))
    updated_at: dt.datetime | None = Field(default=None, validation_alias=AliasChoices("updatedAt", "updated_at"))

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> dt.date | None:  # noqa: ANN401
        return parse_date(v)

    @field_validator("players", mode="before")
    @classmethod
    def _player_list(cls, v: Any) -> list[str]:  # noqa: ANN401
        if v is None:
            return []
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        if isinstance(v, (list, tuple)):
            return [str(p) for p in v if p]
        raise ValueError("players must be a list or a comma-separated string")

    @field_validator("winner", "scores", "comment", mode="before")
    @classmethod
    def _optional_text(cls, v: Any) -> str | None:  # noqa: ANN401
        if v is None:
            return None
        if isinstance(v, dict):
            v = ", ".join(f"{key}: {value}" for key, value in v.items())
        text = str(v).strip()
        return text or None

    @property
    def is_draw(self) -> bool:
        return self.winner is not None and self.winner.lower() == DRAW.lower()


class LastPlayedEntry(BaseModel, frozen=True):
    game: Game
    elapsed_days: int | None  # None = never played / unknown
    times_played: int

    @property
    def name(self) -> str:
        return self.game.name


def safe_rate(wins: int, total: int) -> float:
    return wins / total if total > 0 else 0.0


class WinStatEntry(BaseModel, frozen=True):
    """Per-game win counts for the tracked participants plus the draw bucket."""

    game_id: str
    game_name: str
    total_plays: int
    wins: dict[str, int]

    def win_rate(self, participant: str) -> float:
        return safe_rate(self.wins.get(participant, 0), self.total_plays)


class TotalStatEntry(BaseModel, frozen=True):
    participant: str
    wins: int
    total_plays: int
    win_rate: float


class PlayerStats(BaseModel, frozen=True):
    player: str
    wins: int = 0
    plays: int = 0
    win_rate: float = Field(default=0.0, validation_alias=AliasChoices("winRate", "win_rate"))
    favorite_game: str | None = Field(default=None, validation_alias=AliasChoices("favoriteGame", "favorite_game"))
    recent_plays: list[PlayRecord] = Field(
        default_factory=list,
        validation_alias=AliasChoices("recentPlays", "recent_plays"),
    )


class GameStatEntry(BaseModel, frozen=True):
    game_id: OpaqueId = Field(validation_alias=AliasChoices("gameId", "game_id", "id"))
    game_name: str = Field(validation_alias=AliasChoices("gameName", "game_name", "name"))
    total_plays: int = Field(default=0, validation_alias=AliasChoices("totalPlays", "total_plays", "totalGames"))
    winner_distribution: dict[str, int] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("winnerDistribution", "winner_distribution"),
    )
    last_played: LenientDate = Field(default=None, validation_alias=AliasChoices("lastPlayed", "last_played"))
    avg_players: float | None = Field(default=None, validation_alias=AliasChoices("avgPlayersPerGame", "avg_players"))


class PlayDraft(BaseModel, frozen=True):
    """A play about to be recorded, dumped with the upstream's key names."""

    game_id: str = Field(min_length=1, serialization_alias="gameId")
    date: dt.date
    players: list[str] = Field(min_length=1)
    winner: str | None = None
    scores: str | None = None
    comment: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
