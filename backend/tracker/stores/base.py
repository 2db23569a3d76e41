"""Common load/mutate plumbing shared by the entity stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from tracker.sorting import SortDirection, SortState

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from shared.upstream import CallResult, UpstreamClient
    from tracker.sorting import Column
    from tracker.state import AppState

logger = structlog.get_logger()

T = TypeVar("T")


class Store(ABC):
    """Owns one canonical collection and reports failures to the AppState.

    Store operations never raise on transport or shape problems: the caller
    sees an empty collection (loads) or a False return (mutations) and the
    message lands on the shared error channel.
    """

    name = "store"
    columns: Mapping[str, Column[Any]] = {}
    sort: SortState
    items: list[Any]

    def __init__(self, client: UpstreamClient, state: AppState) -> None:
        self.client = client
        self.state = state

    @property
    def needs_load(self) -> bool:
        return not self.items

    @abstractmethod
    async def load(self) -> None: ...

    async def load_missing(self) -> None:
        """Fill in what is not loaded yet; stores with one collection just load it."""
        await self.load()

    def set_sort(self, column: str, direction: SortDirection | None = None) -> None:
        """Sort by column in the given direction.

        Without a direction this is a header click: the same column flips,
        a new column starts ascending.
        """
        if column not in self.columns:
            raise ValueError(f"Unknown sort column: {column}")
        if direction is None:
            self.sort = self.sort.toggle(column)
        else:
            self.sort = SortState(column, SortDirection(direction))

    async def _request(self, call: Callable[[], Awaitable[CallResult]], message: str) -> CallResult:
        with self.state.loading_scope(message):
            return await call()

    async def _fetch(
        self,
        call: Callable[[], Awaitable[CallResult]],
        parse: Callable[[Any], T | None],
        *,
        message: str,
        failure: str,
    ) -> T | None:
        """Run one read call and parse its payload; None on any failure."""
        result = await self._request(call, message)
        if not result.ok:
            self.state.set_error(f"{failure}: {result.message}")
            return None
        parsed = parse(result.value)
        if parsed is None:
            logger.warning("unrecognised payload shape", store=self.name, failure=failure)
            self.state.set_error(f"{failure}: malformed response")
        return parsed

    async def _mutate(self, call: Callable[[], Awaitable[CallResult]], *, message: str, failure: str) -> bool:
        """Run one write call; reload the whole collection if it succeeded."""
        result = await self._request(call, message)
        if not result.ok:
            self.state.set_error(f"{failure}: {result.message}")
            return False
        logger.info("mutation applied", store=self.name, action=message)
        await self.load()
        return True
