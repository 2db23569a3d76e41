import pytest

from tracker.coordinator import ViewCoordinator
from tracker.state import View
from tracker.stores import GamesStore, LastPlayedStore, PlaysStore, StatsStore
from tracker.tests.helpers import game, network_failure, ok, play


@pytest.fixture
def coordinator(client, state):
    client.list_games.return_value = ok([game("g1", "Azul")])
    client.list_plays.return_value = ok([play("p1")])
    client.get_last_played.return_value = ok([game("g1", "Azul")])
    client.get_win_stats.return_value = ok([])
    client.get_total_stats.return_value = ok({"totalGames": 0, "players": {}})
    return ViewCoordinator(
        state,
        {
            View.GAMES: GamesStore(client, state),
            View.PLAYS: PlaysStore(client, state),
            View.LAST_PLAYED: LastPlayedStore(client, state),
            View.STATS: StatsStore(client, state),
        },
    )


def test_every_view_needs_a_store(client, state):
    with pytest.raises(ValueError, match="No store for views"):
        ViewCoordinator(state, {View.GAMES: GamesStore(client, state)})


async def test_set_view_loads_once(coordinator, client):
    await coordinator.set_view(View.PLAYS)
    await coordinator.set_view(View.GAMES)
    await coordinator.set_view(View.PLAYS)

    assert coordinator.current_view == View.PLAYS
    client.list_plays.assert_awaited_once()
    client.list_games.assert_awaited_once()


async def test_set_view_accepts_plain_names(coordinator, client):
    await coordinator.set_view("last_played")

    assert coordinator.current_view == View.LAST_PLAYED
    client.get_last_played.assert_awaited_once()


async def test_empty_store_is_reloaded_on_next_visit(coordinator, client):
    client.list_plays.return_value = network_failure()
    await coordinator.set_view(View.PLAYS)
    await coordinator.set_view(View.GAMES)

    client.list_plays.return_value = ok([play("p1")])
    await coordinator.set_view(View.PLAYS)

    assert client.list_plays.await_count == 2
    assert [p.id for p in coordinator.store_for(View.PLAYS).items] == ["p1"]


async def test_set_view_clears_error(coordinator, state):
    state.set_error("Failed to add game: HTTP 500")

    await coordinator.set_view(View.STATS)

    assert state.error is None


async def test_stats_view_loaded_once_even_when_empty(coordinator, client):
    await coordinator.set_view(View.STATS)
    await coordinator.set_view(View.GAMES)
    await coordinator.set_view(View.STATS)

    client.get_win_stats.assert_awaited_once()
    client.get_total_stats.assert_awaited_once()


async def test_show_same_view_keeps_error(coordinator, state, client):
    await coordinator.set_view(View.GAMES)
    state.set_error("Failed to sync game: HTTP 502")

    await coordinator.show(View.GAMES)

    assert state.error == "Failed to sync game: HTTP 502"
    client.list_games.assert_awaited_once()


async def test_show_other_view_navigates(coordinator, state):
    state.set_error("stale")

    await coordinator.show(View.PLAYS)

    assert coordinator.current_view == View.PLAYS
    assert state.error is None


async def test_refresh_reloads_current_view(coordinator, client):
    await coordinator.set_view(View.GAMES)
    client.list_games.return_value = ok([game("g1", "Azul"), game("g2", "Brass")])

    await coordinator.refresh()

    assert client.list_games.await_count == 2
    assert len(coordinator.store_for(View.GAMES).items) == 2


async def test_invalid_view_name(coordinator):
    with pytest.raises(ValueError, match="not a valid View"):
        await coordinator.set_view("settings")


async def test_stats_view_fetches_only_missing_aggregate(coordinator, client):
    stats = coordinator.store_for(View.STATS)
    stats.totals = []

    await coordinator.set_view(View.STATS)

    client.get_win_stats.assert_awaited_once()
    client.get_total_stats.assert_not_awaited()
