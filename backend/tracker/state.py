"""Shared UI state: the error channel, the loading flag and the current view.

One AppState is created per tracker session and handed to every store, form
and the coordinator. Everything runs on a single event loop, so writers
never interleave between awaits.
"""

from __future__ import annotations

import asyncio
import contextlib
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = structlog.get_logger()

DEFAULT_ERROR_TTL_SECONDS = 5.0
DEFAULT_LOADING_MESSAGE = "Loading..."


class View(StrEnum):
    GAMES = "games"
    PLAYS = "plays"
    LAST_PLAYED = "last_played"
    STATS = "stats"


class AppState:
    """Process-wide error/loading/current-view state.

    Only one error is visible at a time: a new error replaces the previous
    one and restarts the auto-dismiss timer. The loading flag is always
    reset after a call, whatever its outcome.
    """

    def __init__(self, error_ttl_seconds: float = DEFAULT_ERROR_TTL_SECONDS) -> None:
        self.loading = False
        self.loading_message = DEFAULT_LOADING_MESSAGE
        self.error: str | None = None
        self.current_view = View.GAMES
        self._error_ttl_seconds = error_ttl_seconds
        self._pending_calls = 0
        self._error_task: asyncio.Task[None] | None = None

    def set_loading(self, is_loading: bool, message: str = DEFAULT_LOADING_MESSAGE) -> None:  # noqa: FBT001
        self.loading = is_loading
        self.loading_message = message

    @contextlib.contextmanager
    def loading_scope(self, message: str = DEFAULT_LOADING_MESSAGE) -> Iterator[None]:
        """Hold the loading flag for the duration of one upstream call.

        Overlapping scopes (concurrent loads) keep the flag set until the last
        one exits.
        """
        self._pending_calls += 1
        self.set_loading(True, message)
        try:
            yield
        finally:
            self._pending_calls -= 1
            if self._pending_calls == 0:
                self.set_loading(False)

    def set_error(self, message: str) -> None:
        """Show an error and schedule its dismissal. Must run inside the event loop."""
        self._cancel_error_timer()
        self.error = message
        logger.warning("error reported", message=message)
        self._error_task = asyncio.create_task(self._expire_error())

    def clear_error(self) -> None:
        self._cancel_error_timer()
        self.error = None

    async def close(self) -> None:
        """Cancel a pending dismissal timer (session teardown)."""
        task = self._error_task
        self._cancel_error_timer()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def _cancel_error_timer(self) -> None:
        if self._error_task is not None and not self._error_task.done():
            self._error_task.cancel()
        self._error_task = None

    async def _expire_error(self) -> None:
        await asyncio.sleep(self._error_ttl_seconds)
        self.error = None
        self._error_task = None
