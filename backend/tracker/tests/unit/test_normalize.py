import datetime as dt

import pytest

from tracker.models import DRAW
from tracker.normalize import (
    first_match,
    normalize_games,
    normalize_last_played,
    normalize_plays,
    normalize_total_stats,
    normalize_win_stats,
    parse_game_stats,
    parse_games,
    parse_last_played,
    parse_player_stats,
    parse_total_stats,
    parse_win_stats,
)
from tracker.sorting import LAST_PLAYED_COLUMNS, SortState, sort_items

PARTICIPANTS = ["Alice", "Bob"]
TODAY = dt.date(2024, 6, 15)

AZUL = {"id": "g1", "name": "Azul"}
BRASS = {"id": "g2", "name": "Brass"}


class TestFirstMatch:
    def test_first_non_none_wins(self):
        assert first_match(1, [lambda _: None, lambda p: p + 1, lambda p: p + 2]) == 2

    def test_no_match(self):
        assert first_match(1, [lambda _: None]) is None


class TestGames:
    @pytest.mark.parametrize(
        "payload",
        [
            [AZUL, BRASS],
            {"games": [AZUL, BRASS]},
            {"data": [AZUL, BRASS]},
            {"data": {"games": [AZUL, BRASS]}},
        ],
    )
    def test_accepted_shapes(self, payload):
        assert [g.name for g in normalize_games(payload)] == ["Azul", "Brass"]

    @pytest.mark.parametrize("payload", [None, "nope", {"items": []}, {"data": {"other": []}}, 42])
    def test_unknown_shape_defaults_to_empty(self, payload):
        assert parse_games(payload) is None
        assert normalize_games(payload) == []

    def test_invalid_records_skipped(self):
        games = normalize_games({"games": [AZUL, {"id": "x"}, "junk", BRASS]})

        assert [g.id for g in games] == ["g1", "g2"]

    def test_infinite_ranking_is_unranked(self):
        assert normalize_games([{**AZUL, "ranking": float("inf")}])[0].ranking is None


class TestPlays:
    def test_plays_key(self):
        payload = {"plays": [{"id": "p1", "gameId": "g1", "date": "2024-06-01", "players": ["Alice"]}], "total": 1}

        plays = normalize_plays(payload)

        assert len(plays) == 1
        assert plays[0].players == ["Alice"]

    def test_nested_data(self):
        payload = {"data": {"plays": [{"id": "p1", "gameId": "g1", "date": "2024-06-01"}]}}

        assert [p.id for p in normalize_plays(payload)] == ["p1"]

    def test_garbage_is_empty(self):
        assert normalize_plays({"plays": "none"}) == []

    @pytest.mark.parametrize("players", [5, True, {"a": 1}, 2.5])
    def test_unusable_players_skip_the_record(self, players):
        payload = {
            "plays": [
                {"id": "p1", "gameId": "g1", "date": "2024-06-01", "players": players},
                {"id": "p2", "gameId": "g1", "date": "2024-06-02", "players": "Alice, Bob"},
            ],
        }

        assert [p.id for p in normalize_plays(payload)] == ["p2"]

    def test_unusable_players_in_player_stats(self):
        payload = {"player": "Alice", "recentPlays": [{"id": "p1", "gameId": "g1", "date": "2024-06-01", "players": 5}]}

        assert parse_player_stats(payload) is None


class TestWinStats:
    def test_flat_fields_lifted_into_wins(self):
        payload = {"stats": [{"gameId": "g1", "gameName": "Azul", "Alice": 3, "Bob": 1, "Draw": 1, "totalGames": 5}]}

        [entry] = normalize_win_stats(payload, PARTICIPANTS)

        assert entry.game_name == "Azul"
        assert entry.total_plays == 5
        assert entry.wins == {"Alice": 3, "Bob": 1, DRAW: 1}

    def test_lower_case_fields_and_missing_participant(self):
        payload = [{"gameId": "g1", "name": "Azul", "alice": 2, "totalGames": 2}]

        [entry] = normalize_win_stats(payload, PARTICIPANTS)

        assert entry.wins == {"Alice": 2, "Bob": 0, DRAW: 0}

    def test_nested_wins_map(self):
        payload = {"data": [{"gameId": 3, "gameName": "Brass", "wins": {"Alice": 1, "Bob": 2}, "totalPlays": 3}]}

        [entry] = normalize_win_stats(payload, PARTICIPANTS)

        assert entry.game_id == "3"
        assert entry.wins == {"Alice": 1, "Bob": 2, DRAW: 0}
        assert entry.total_plays == 3

    def test_total_falls_back_to_sum(self):
        [entry] = normalize_win_stats([{"gameName": "Azul", "Alice": 2, "Bob": 1}], PARTICIPANTS)

        assert entry.total_plays == 3

    def test_custom_draw_label(self):
        [entry] = normalize_win_stats([{"gameName": "Azul", "Tie": 2}], PARTICIPANTS, draw_label="Tie")

        assert entry.wins["Tie"] == 2

    def test_records_without_name_skipped(self):
        assert normalize_win_stats([{"Alice": 1}, {"gameName": "Azul"}], PARTICIPANTS)[0].game_name == "Azul"

    def test_unknown_shape(self):
        assert parse_win_stats({"winners": []}, PARTICIPANTS) is None


class TestTotalStats:
    def test_players_map_expanded_with_shared_denominator(self):
        payload = {"totalGames": 10, "players": {"Alice": 6, "Bob": 3, "Draw": 1}}

        totals = normalize_total_stats(payload)

        assert [(t.participant, t.wins, t.total_plays) for t in totals] == [
            ("Alice", 6, 10),
            ("Bob", 3, 10),
            ("Draw", 1, 10),
        ]
        assert [t.win_rate for t in totals] == pytest.approx([0.6, 0.3, 0.1])
        assert sum(t.win_rate for t in totals) == pytest.approx(1.0)

    def test_zero_total_gives_zero_rates(self):
        totals = normalize_total_stats({"totalGames": 0, "players": {"Alice": 0, "Bob": 0}})

        assert [t.win_rate for t in totals] == [0.0, 0.0]

    def test_map_under_data(self):
        totals = normalize_total_stats({"data": {"totalGames": 4, "players": {"Alice": 1}}})

        assert totals[0].win_rate == 0.25

    def test_list_form(self):
        payload = {"totals": [{"player": "Alice", "wins": 2, "plays": 8}, {"wins": 1}]}

        [alice] = normalize_total_stats(payload)

        assert alice.participant == "Alice"
        assert alice.win_rate == 0.25

    def test_unknown_shape(self):
        assert parse_total_stats({"players": ["Alice"]}) is None
        assert normalize_total_stats(None) == []


class TestLastPlayed:
    @pytest.mark.parametrize("wrap", [lambda items: items, lambda items: {"data": items}, lambda items: {"games": items}])
    def test_accepted_shapes(self, wrap):
        entries = normalize_last_played(wrap([{**AZUL, "lastPlayed": "2024-06-10"}]), TODAY)

        assert entries[0].elapsed_days == 5

    def test_floor_of_elapsed_days_with_time_part(self):
        [entry] = normalize_last_played([{**AZUL, "lastPlayed": "2024-06-14T23:59:00"}], TODAY)

        assert entry.elapsed_days == 1

    def test_null_last_played_is_unknown_and_sorts_last(self):
        payload = [
            {"id": "g1", "name": "Never", "lastPlayed": None, "timesPlayed": 5},
            {"id": "g2", "name": "Recent", "lastPlayed": "2024-06-14", "timesPlayed": 1},
            {"id": "g3", "name": "Old", "lastPlayed": "2024-01-01", "timesPlayed": 2},
        ]

        entries = normalize_last_played(payload, TODAY)
        never = entries[0]
        ascending = sort_items(entries, LAST_PLAYED_COLUMNS, SortState("elapsed_days"))

        assert never.elapsed_days is None
        assert never.times_played == 5
        assert [e.name for e in ascending] == ["Recent", "Old", "Never"]

    def test_unknown_shape(self):
        assert parse_last_played({"items": []}, TODAY) is None


class TestSupplementary:
    def test_game_stats(self):
        payload = {"games": [{"gameId": 1, "gameName": "Azul", "totalPlays": 3, "winnerDistribution": {"Alice": 2}}]}

        [entry] = parse_game_stats(payload)

        assert entry.game_id == "1"
        assert entry.winner_distribution == {"Alice": 2}

    def test_player_stats(self):
        payload = {"player": "Alice", "wins": 4, "plays": 8, "winRate": 0.5, "favoriteGame": "Azul", "recentPlays": []}

        stats = parse_player_stats(payload)

        assert stats is not None
        assert stats.favorite_game == "Azul"
        assert stats.win_rate == 0.5

    def test_player_stats_unknown_shape(self):
        assert parse_player_stats([]) is None
