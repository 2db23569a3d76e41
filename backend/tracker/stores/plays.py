"""Play record store, including the two-phase delete."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from tracker.normalize import parse_plays
from tracker.sorting import DEFAULT_PLAY_SORT, PLAY_COLUMNS, filter_plays, sort_items
from tracker.stores.base import Store

if TYPE_CHECKING:
    from shared.upstream import UpstreamClient
    from tracker.models import PlayDraft, PlayRecord
    from tracker.state import AppState

logger = structlog.get_logger()

DEFAULT_PLAYS_LIMIT = 50


class PlaysStore(Store):
    name = "plays"
    columns = PLAY_COLUMNS

    def __init__(self, client: UpstreamClient, state: AppState, limit: int = DEFAULT_PLAYS_LIMIT) -> None:
        super().__init__(client, state)
        self.limit = limit
        self.items: list[PlayRecord] = []
        self.filter_text = ""
        self.sort = DEFAULT_PLAY_SORT
        self.pending_delete: str | None = None

    async def load(self) -> None:
        plays = await self._fetch(
            lambda: self.client.list_plays({"limit": str(self.limit)}),
            parse_plays,
            message="Loading plays...",
            failure="Failed to load plays",
        )
        self.items = plays or []

    def find(self, play_id: str) -> PlayRecord | None:
        return next((play for play in self.items if play.id == play_id), None)

    def filtered(self) -> list[PlayRecord]:
        matching = filter_plays(self.items, self.filter_text)
        return sort_items(matching, self.columns, self.sort)

    async def record(self, draft: PlayDraft) -> bool:
        return await self._mutate(
            lambda: self.client.record_play(draft.to_payload()),
            message="Recording play...",
            failure="Failed to record play",
        )

    async def update(self, play_id: str, updates: dict[str, Any]) -> bool:
        return await self._mutate(
            lambda: self.client.update_play(play_id, updates),
            message="Updating play...",
            failure="Failed to update play",
        )

    def request_delete(self, play_id: str) -> None:
        """First phase: remember which play awaits confirmation."""
        self.pending_delete = play_id

    def cancel_delete(self) -> None:
        self.pending_delete = None

    async def confirm_delete(self, play_id: str) -> bool:
        """Second phase: delete only the play that was requested."""
        if self.pending_delete != play_id:
            logger.warning("delete not requested", play_id=play_id, pending=self.pending_delete)
            return False
        self.pending_delete = None
        return await self._mutate(
            lambda: self.client.delete_play(play_id),
            message="Deleting play...",
            failure="Failed to delete play",
        )
