import asyncio

import pytest

from tracker.state import AppState, View


class TestErrorChannel:
    async def test_error_auto_clears(self):
        state = AppState(error_ttl_seconds=0.01)

        state.set_error("Failed to load games: HTTP 500")
        assert state.error == "Failed to load games: HTTP 500"

        await asyncio.sleep(0.05)
        assert state.error is None

    async def test_newer_error_replaces_and_restarts_timer(self):
        state = AppState(error_ttl_seconds=0.1)

        state.set_error("first")
        await asyncio.sleep(0.06)
        state.set_error("second")
        await asyncio.sleep(0.06)

        assert state.error == "second"
        await state.close()

    async def test_clear_error_cancels_timer(self):
        state = AppState(error_ttl_seconds=60)
        state.set_error("boom")
        task = state._error_task

        state.clear_error()
        await asyncio.sleep(0)

        assert state.error is None
        assert task is not None
        assert task.cancelled()


class TestLoading:
    def test_scope_resets_flag_on_error(self):
        state = AppState()

        with pytest.raises(KeyError), state.loading_scope("Loading games..."):
            assert state.loading
            assert state.loading_message == "Loading games..."
            raise KeyError("boom")

        assert not state.loading

    def test_overlapping_scopes_keep_flag_until_last_exit(self):
        state = AppState()

        with state.loading_scope("a"):
            with state.loading_scope("b"):
                pass
            assert state.loading

        assert not state.loading


def test_default_view_is_games():
    assert AppState().current_view == View.GAMES
