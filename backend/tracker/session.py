"""One tracker session: shared state, the four stores, coordinator and forms."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

from tracker.coordinator import ViewCoordinator
from tracker.forms import AddGameForm, RecordPlayForm
from tracker.state import AppState, View
from tracker.stores import GamesStore, LastPlayedStore, PlaysStore, StatsStore

if TYPE_CHECKING:
    from collections.abc import Callable

    from shared.upstream import UpstreamClient
    from tracker.settings import TrackerSettings


class TrackerSession:
    def __init__(
        self,
        client: UpstreamClient,
        settings: TrackerSettings,
        today: Callable[[], dt.date] = dt.date.today,
    ) -> None:
        self.settings = settings
        self.state = AppState(error_ttl_seconds=settings.error_ttl_seconds)
        self.games = GamesStore(client, self.state)
        self.plays = PlaysStore(client, self.state, limit=settings.plays_limit)
        self.last_played = LastPlayedStore(client, self.state, today=today)
        self.stats = StatsStore(client, self.state, settings.participants, settings.draw_label)
        self.coordinator = ViewCoordinator(
            self.state,
            {
                View.GAMES: self.games,
                View.PLAYS: self.plays,
                View.LAST_PLAYED: self.last_played,
                View.STATS: self.stats,
            },
        )
        self.add_game_form = AddGameForm(self.games)
        self.record_play_form = RecordPlayForm(self.plays, today=today)

    async def close(self) -> None:
        await self.state.close()
