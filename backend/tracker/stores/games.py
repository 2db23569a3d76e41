"""Game collection store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from tracker.normalize import parse_games, parse_plays
from tracker.sorting import DEFAULT_GAME_SORT, GAME_COLUMNS, filter_games, sort_items
from tracker.stores.base import Store

if TYPE_CHECKING:
    from shared.upstream import UpstreamClient
    from tracker.models import Game, GameStatus, PlayRecord
    from tracker.state import AppState


class GamesStore(Store):
    name = "games"
    columns = GAME_COLUMNS

    def __init__(self, client: UpstreamClient, state: AppState) -> None:
        super().__init__(client, state)
        self.items: list[Game] = []
        self.filter_text = ""
        self.status_filter: GameStatus | None = None
        self.sort = DEFAULT_GAME_SORT

    async def load(self) -> None:
        games = await self._fetch(
            self.client.list_games,
            parse_games,
            message="Loading games...",
            failure="Failed to load games",
        )
        self.items = games or []

    def find(self, game_id: str) -> Game | None:
        return next((game for game in self.items if game.id == game_id), None)

    def filtered(self) -> list[Game]:
        """Games matching the current filters, in the current sort order."""
        matching = filter_games(self.items, self.filter_text, self.status_filter)
        return sort_items(matching, self.columns, self.sort)

    async def add(self, external_id: int) -> bool:
        return await self._mutate(
            lambda: self.client.add_game(external_id),
            message="Adding game...",
            failure="Failed to add game",
        )

    async def update_notes(self, game_id: str, notes: str) -> bool:
        return await self._mutate(
            lambda: self.client.update_game_notes(game_id, notes),
            message="Saving notes...",
            failure="Failed to update notes",
        )

    async def update_data(self, game_id: str, data: dict[str, Any]) -> bool:
        return await self._mutate(
            lambda: self.client.update_game_data(game_id, data),
            message="Saving game data...",
            failure="Failed to update game data",
        )

    async def sync(self, game_id: str) -> bool:
        return await self._mutate(
            lambda: self.client.sync_game(game_id),
            message="Syncing with BoardGameGeek...",
            failure="Failed to sync game",
        )

    async def fetch_history(self, game_id: str) -> list[PlayRecord]:
        """Plays of one game. Not cached; the canonical collection is untouched."""
        plays = await self._fetch(
            lambda: self.client.get_game_history(game_id),
            parse_plays,
            message="Loading play history...",
            failure="Failed to load play history",
        )
        return plays or []
