"""Dashboard pages rendered from the tracker session's stores."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from starlette.responses import RedirectResponse

from gateway.views.assets import VIEW_PATHS
from tracker.models import GameStatus
from tracker.sorting import SortDirection
from tracker.state import View

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.templating import Jinja2Templates

    from tracker.session import TrackerSession
    from tracker.stores import Store

logger = structlog.get_logger()


def _session(request: Request) -> TrackerSession:
    return request.app.state.tracker


def _render(request: Request, template: str, context: dict, status_code: int = 200) -> Response:
    templates: Jinja2Templates = request.app.state.templates
    session = _session(request)
    return templates.TemplateResponse(
        request,
        template,
        {"app_state": session.state, "current_view": session.state.current_view, **context},
        status_code=status_code,
    )


def _redirect(path: str) -> RedirectResponse:
    return RedirectResponse(url=path, status_code=303)


def _sort_direction(raw: str | None) -> SortDirection:
    try:
        return SortDirection(raw or SortDirection.ASC)
    except ValueError:
        return SortDirection.ASC


def _apply_sort(request: Request, store: Store) -> None:
    """Apply ?sort=column&dir=asc|desc. The links carry the direction, so reloading keeps the order."""
    column = request.query_params.get("sort")
    if not column:
        return
    try:
        store.set_sort(column, _sort_direction(request.query_params.get("dir")))
    except ValueError:
        logger.debug("ignoring unknown sort column", column=column, store=store.name)


def _status_filter(raw: str | None) -> GameStatus | None:
    if not raw:
        return None
    try:
        return GameStatus(raw)
    except ValueError:
        return None


async def index(_request: Request) -> Response:
    return _redirect(VIEW_PATHS[View.GAMES])


# games


async def games_page(request: Request) -> Response:
    """GET /games - game collection with text/status filters and sortable columns."""
    session = _session(request)
    await session.coordinator.show(View.GAMES)
    games = session.games
    games.filter_text = request.query_params.get("q", "")
    games.status_filter = _status_filter(request.query_params.get("status"))
    _apply_sort(request, games)
    return _render(
        request,
        "games.html",
        {
            "games": games.filtered(),
            "store": games,
            "statuses": list(GameStatus),
            "form": session.add_game_form,
        },
    )


async def add_game(request: Request) -> Response:
    """POST /games - submit the add-game form."""
    session = _session(request)
    form_data = await request.form()
    session.add_game_form.external_id = str(form_data.get("bggId", ""))
    await session.add_game_form.submit()
    return _redirect(VIEW_PATHS[View.GAMES])


async def game_page(request: Request) -> Response:
    """GET /games/{game_id} - one game with its play history."""
    session = _session(request)
    await session.coordinator.show(View.GAMES)
    game_id = request.path_params["game_id"]
    game = session.games.find(game_id)
    if game is None:
        return _render(request, "not_found.html", {"what": f"Game {game_id}"}, status_code=404)
    history = await session.games.fetch_history(game_id)
    return _render(request, "game.html", {"game": game, "history": history})


async def update_notes(request: Request) -> Response:
    session = _session(request)
    game_id = request.path_params["game_id"]
    form_data = await request.form()
    await session.games.update_notes(game_id, str(form_data.get("notes", "")))
    return _redirect(f"{VIEW_PATHS[View.GAMES]}/{game_id}")


async def sync_game(request: Request) -> Response:
    session = _session(request)
    game_id = request.path_params["game_id"]
    await session.games.sync(game_id)
    return _redirect(f"{VIEW_PATHS[View.GAMES]}/{game_id}")


# plays


async def plays_page(request: Request) -> Response:
    """GET /plays - play log with a text filter, sortable columns and delete confirmation."""
    session = _session(request)
    await session.coordinator.show(View.PLAYS)
    plays = session.plays
    plays.filter_text = request.query_params.get("q", "")
    _apply_sort(request, plays)
    pending = plays.find(plays.pending_delete) if plays.pending_delete else None
    return _render(
        request,
        "plays.html",
        {
            "plays": plays.filtered(),
            "store": plays,
            "pending": pending,
            "form": session.record_play_form,
            "games": session.games.items,
            "participants": session.settings.participants,
            "draw_label": session.settings.draw_label,
        },
    )


async def record_play(request: Request) -> Response:
    """POST /plays - submit the record-play form."""
    session = _session(request)
    form = session.record_play_form
    form_data = await request.form()
    form.game_id = str(form_data.get("gameId", ""))
    form.date = str(form_data.get("date", ""))
    form.players = str(form_data.get("players", ""))
    form.winner = str(form_data.get("winner", ""))
    form.scores = str(form_data.get("scores", ""))
    form.comment = str(form_data.get("comment", ""))
    await form.submit()
    return _redirect(VIEW_PATHS[View.PLAYS])


async def request_delete_play(request: Request) -> Response:
    _session(request).plays.request_delete(request.path_params["play_id"])
    return _redirect(VIEW_PATHS[View.PLAYS])


async def confirm_delete_play(request: Request) -> Response:
    await _session(request).plays.confirm_delete(request.path_params["play_id"])
    return _redirect(VIEW_PATHS[View.PLAYS])


async def cancel_delete_play(request: Request) -> Response:
    _session(request).plays.cancel_delete()
    return _redirect(VIEW_PATHS[View.PLAYS])


# last played and statistics


async def last_played_page(request: Request) -> Response:
    session = _session(request)
    await session.coordinator.show(View.LAST_PLAYED)
    store = session.last_played
    _apply_sort(request, store)
    return _render(request, "last_played.html", {"entries": store.sorted(), "store": store})


async def stats_page(request: Request) -> Response:
    """GET /stats - overall totals, per-game win counts and the latest plays."""
    session = _session(request)
    await session.coordinator.show(View.STATS)
    stats = session.stats
    if stats.recent is None:
        await stats.load_recent(session.settings.recent_limit)
    return _render(
        request,
        "stats.html",
        {
            "totals": stats.ranked_totals(),
            "winners": stats.winners_by_plays(),
            "recent": stats.recent or [],
            "buckets": [*stats.participants, stats.draw_label],
        },
    )


async def player_page(request: Request) -> Response:
    session = _session(request)
    await session.coordinator.show(View.STATS)
    player = request.path_params["player"]
    player_stats = await session.stats.fetch_player(player)
    if player_stats is None:
        return _render(request, "not_found.html", {"what": f"Player {player}"}, status_code=404)
    return _render(request, "player.html", {"player": player_stats})


# session controls


async def refresh(request: Request) -> Response:
    """POST /refresh - reload the current view from the upstream."""
    session = _session(request)
    await session.coordinator.refresh()
    return _redirect(VIEW_PATHS[session.state.current_view])


async def dismiss_error(request: Request) -> Response:
    session = _session(request)
    session.state.clear_error()
    return _redirect(VIEW_PATHS[session.state.current_view])
