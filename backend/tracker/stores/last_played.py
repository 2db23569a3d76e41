"""Days-since-last-play store."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

from tracker.normalize import parse_last_played
from tracker.sorting import DEFAULT_LAST_PLAYED_SORT, LAST_PLAYED_COLUMNS, sort_items
from tracker.stores.base import Store

if TYPE_CHECKING:
    from collections.abc import Callable

    from shared.upstream import UpstreamClient
    from tracker.models import LastPlayedEntry
    from tracker.state import AppState


class LastPlayedStore(Store):
    name = "last_played"
    columns = LAST_PLAYED_COLUMNS

    def __init__(
        self,
        client: UpstreamClient,
        state: AppState,
        today: Callable[[], dt.date] = dt.date.today,
    ) -> None:
        super().__init__(client, state)
        self._today = today
        self.items: list[LastPlayedEntry] = []
        self.sort = DEFAULT_LAST_PLAYED_SORT

    async def load(self) -> None:
        # elapsed days are relative to the moment of loading
        today = self._today()
        entries = await self._fetch(
            self.client.get_last_played,
            lambda payload: parse_last_played(payload, today),
            message="Loading last played...",
            failure="Failed to load last played",
        )
        self.items = entries or []

    def sorted(self) -> list[LastPlayedEntry]:
        return sort_items(self.items, self.columns, self.sort)
