"""Navigation between views, loading each view's data on first visit."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from tracker.state import View

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tracker.state import AppState
    from tracker.stores import Store

logger = structlog.get_logger()


class ViewCoordinator:
    """Switches the current view and lazily loads the store behind it.

    A store is loaded only while its canonical collection is empty, so
    moving back and forth between views does not refetch. Two overlapping
    loads of the same store are not cancelled; the one that resolves last
    wins.
    """

    def __init__(self, state: AppState, stores: Mapping[View, Store]) -> None:
        missing = set(View) - set(stores)
        if missing:
            raise ValueError(f"No store for views: {sorted(missing)}")
        self.state = state
        self._stores = dict(stores)

    @property
    def current_view(self) -> View:
        return self.state.current_view

    def store_for(self, view: View) -> Store:
        return self._stores[view]

    async def set_view(self, view: View | str) -> None:
        view = View(view)
        self.state.current_view = view
        self.state.clear_error()
        store = self._stores[view]
        if store.needs_load:
            logger.debug("loading view", view=view)
            await store.load_missing()

    async def refresh(self) -> None:
        """Reload the current view's store unconditionally."""
        await self._stores[self.state.current_view].load()

    async def show(self, view: View | str) -> None:
        """Render-time entry point: navigate if the view changed, else only fill an empty store.

        Re-rendering the current view keeps whatever error is on display.
        """
        view = View(view)
        if view != self.state.current_view:
            await self.set_view(view)
            return
        store = self._stores[view]
        if store.needs_load:
            await store.load_missing()
