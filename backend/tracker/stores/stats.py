"""Aggregate statistics store."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from tracker.models import DRAW
from tracker.normalize import (
    parse_game_stats,
    parse_player_stats,
    parse_recent_plays,
    parse_total_stats,
    parse_win_stats,
)
from tracker.stores.base import Store

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shared.upstream import UpstreamClient
    from tracker.models import GameStatEntry, PlayerStats, PlayRecord, TotalStatEntry, WinStatEntry
    from tracker.state import AppState

DEFAULT_RECENT_LIMIT = 10


class StatsStore(Store):
    """Win statistics per game and overall totals.

    ``winners`` and ``totals`` stay None until their first load completes; a
    failed load leaves an empty list, which still counts as loaded.
    """

    name = "stats"

    def __init__(
        self,
        client: UpstreamClient,
        state: AppState,
        participants: Sequence[str] = ("Alice", "Bob"),
        draw_label: str = DRAW,
    ) -> None:
        super().__init__(client, state)
        self.participants = list(participants)
        self.draw_label = draw_label
        self.winners: list[WinStatEntry] | None = None
        self.totals: list[TotalStatEntry] | None = None
        self.recent: list[PlayRecord] | None = None
        self.game_stats: list[GameStatEntry] | None = None

    @property
    def is_loaded(self) -> bool:
        return self.winners is not None and self.totals is not None

    @property
    def needs_load(self) -> bool:
        return not self.is_loaded

    async def load(self) -> None:
        """Refetch both aggregates."""
        await asyncio.gather(self.load_win_stats(), self.load_total_stats())

    async def load_all(self) -> None:
        """Fetch whichever aggregates are still missing, concurrently."""
        pending = []
        if self.winners is None:
            pending.append(self.load_win_stats())
        if self.totals is None:
            pending.append(self.load_total_stats())
        await asyncio.gather(*pending)

    async def load_missing(self) -> None:
        await self.load_all()

    async def load_win_stats(self) -> None:
        winners = await self._fetch(
            self.client.get_win_stats,
            lambda payload: parse_win_stats(payload, self.participants, self.draw_label),
            message="Loading win statistics...",
            failure="Failed to load win stats",
        )
        self.winners = winners or []

    async def load_total_stats(self) -> None:
        totals = await self._fetch(
            self.client.get_total_stats,
            parse_total_stats,
            message="Loading total statistics...",
            failure="Failed to load total stats",
        )
        self.totals = totals or []

    async def load_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> None:
        recent = await self._fetch(
            lambda: self.client.get_recent_plays(limit),
            parse_recent_plays,
            message="Loading recent plays...",
            failure="Failed to load recent plays",
        )
        self.recent = recent or []

    async def load_game_stats(self) -> None:
        game_stats = await self._fetch(
            self.client.get_game_stats,
            parse_game_stats,
            message="Loading game statistics...",
            failure="Failed to load game stats",
        )
        self.game_stats = game_stats or []

    async def fetch_player(self, player: str) -> PlayerStats | None:
        return await self._fetch(
            lambda: self.client.get_player_stats(player),
            parse_player_stats,
            message=f"Loading stats for {player}...",
            failure="Failed to load player stats",
        )

    def ranked_totals(self) -> list[TotalStatEntry]:
        """Totals by win rate, best first; ties keep upstream order."""
        return sorted(self.totals or [], key=lambda entry: entry.win_rate, reverse=True)

    def winners_by_plays(self) -> list[WinStatEntry]:
        return sorted(self.winners or [], key=lambda entry: entry.total_plays, reverse=True)
