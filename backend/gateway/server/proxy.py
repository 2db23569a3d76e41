"""JSON proxy for the upstream /v1 API.

Every handler answers with an ApiEnvelope whose ``status`` equals the HTTP
status of the response: 200/201 on success, the upstream status on upstream
errors, 502 when the upstream was unreachable or answered garbage, 400 when
the request was rejected locally without calling the upstream.
"""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from starlette.responses import JSONResponse
from starlette.routing import Route

from shared.upstream import ApiEnvelope, ErrorKind, Success

if TYPE_CHECKING:
    from starlette.requests import Request

    from shared.upstream import CallResult, UpstreamClient


class BadRequestError(Exception):
    """Request rejected before reaching the upstream."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def envelope_response(envelope: ApiEnvelope) -> JSONResponse:
    return JSONResponse(envelope.model_dump(), status_code=envelope.status)


def http_status_for(result: CallResult, *, created: bool = False) -> int:
    if isinstance(result, Success):
        return HTTPStatus.CREATED if created else HTTPStatus.OK
    if result.error_kind == ErrorKind.UPSTREAM and HTTPStatus.BAD_REQUEST <= result.status_code < 600:  # noqa: PLR2004
        return result.status_code
    return HTTPStatus.BAD_GATEWAY


def result_response(result: CallResult, *, created: bool = False) -> JSONResponse:
    status = int(http_status_for(result, created=created))
    return envelope_response(ApiEnvelope.from_result(result).model_copy(update={"status": status}))


async def _json_object(request: Request) -> dict[str, Any]:
    raw_body = await request.body()
    if not raw_body.strip():
        return {}
    try:
        body = json.loads(raw_body)
    except (ValueError, json.JSONDecodeError):  # fmt: skip
        raise BadRequestError("Invalid JSON body") from None
    if not isinstance(body, dict):
        raise BadRequestError("JSON body must be an object")
    return body


def _upstream(request: Request) -> UpstreamClient:
    return request.app.state.upstream


def _path_param(request: Request, name: str) -> str:
    return request.path_params[name]


# games


async def list_games(request: Request) -> JSONResponse:
    query = dict(request.query_params) or None
    return result_response(await _upstream(request).list_games(query))


async def get_game(request: Request) -> JSONResponse:
    return result_response(await _upstream(request).get_game(_path_param(request, "game_id")))


async def add_game(request: Request) -> JSONResponse:
    body = await _json_object(request)
    external_id = body.get("bggId")
    if isinstance(external_id, bool) or not isinstance(external_id, int) or external_id <= 0:
        raise BadRequestError("Invalid or missing bggId")
    return result_response(await _upstream(request).add_game(external_id), created=True)


async def update_game_notes(request: Request) -> JSONResponse:
    body = await _json_object(request)
    notes = body.get("notes")
    if not isinstance(notes, str):
        raise BadRequestError("Missing notes field")
    game_id = _path_param(request, "game_id")
    return result_response(await _upstream(request).update_game_notes(game_id, notes))


async def update_game_data(request: Request) -> JSONResponse:
    body = await _json_object(request)
    data = body.get("data")
    if not isinstance(data, dict):
        raise BadRequestError("Missing data field")
    game_id = _path_param(request, "game_id")
    return result_response(await _upstream(request).update_game_data(game_id, data))


async def sync_game(request: Request) -> JSONResponse:
    return result_response(await _upstream(request).sync_game(_path_param(request, "game_id")))


async def get_game_history(request: Request) -> JSONResponse:
    return result_response(await _upstream(request).get_game_history(_path_param(request, "game_id")))


# plays


async def list_plays(request: Request) -> JSONResponse:
    query = dict(request.query_params) or None
    return result_response(await _upstream(request).list_plays(query))


async def record_play(request: Request) -> JSONResponse:
    body = await _json_object(request)
    if not body:
        raise BadRequestError("Missing play data")
    return result_response(await _upstream(request).record_play(body), created=True)


async def get_play(request: Request) -> JSONResponse:
    return result_response(await _upstream(request).get_play(_path_param(request, "play_id")))


async def update_play(request: Request) -> JSONResponse:
    body = await _json_object(request)
    play_id = _path_param(request, "play_id")
    return result_response(await _upstream(request).update_play(play_id, body))


async def delete_play(request: Request) -> JSONResponse:
    return result_response(await _upstream(request).delete_play(_path_param(request, "play_id")))


# statistics


async def get_win_stats(request: Request) -> JSONResponse:
    return result_response(await _upstream(request).get_win_stats())


async def get_total_stats(request: Request) -> JSONResponse:
    return result_response(await _upstream(request).get_total_stats())


async def get_last_played(request: Request) -> JSONResponse:
    return result_response(await _upstream(request).get_last_played())


async def get_recent_plays(request: Request) -> JSONResponse:
    raw_limit = request.query_params.get("limit")
    limit = None
    if raw_limit is not None:
        try:
            limit = int(raw_limit)
        except ValueError:
            raise BadRequestError("limit must be a positive integer") from None
        if limit <= 0:
            raise BadRequestError("limit must be a positive integer")
    return result_response(await _upstream(request).get_recent_plays(limit))


async def get_player_stats(request: Request) -> JSONResponse:
    return result_response(await _upstream(request).get_player_stats(_path_param(request, "player")))


async def get_game_stats(request: Request) -> JSONResponse:
    return result_response(await _upstream(request).get_game_stats())


# utilities


async def export_data(request: Request) -> JSONResponse:
    return result_response(await _upstream(request).export_data())


async def run_query(request: Request) -> JSONResponse:
    body = await _json_object(request)
    sql = body.get("sql")
    if not isinstance(sql, str) or not sql.strip():
        raise BadRequestError("Missing sql field")
    return result_response(await _upstream(request).query(sql))


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


API_ROUTES = [
    Route("/v1/games", list_games, methods=["GET"], name="list_games"),
    Route("/v1/games", add_game, methods=["POST"], name="add_game"),
    Route("/v1/games/{game_id}", get_game, methods=["GET"], name="get_game"),
    Route("/v1/games/{game_id}/notes", update_game_notes, methods=["PATCH"], name="update_game_notes"),
    Route("/v1/games/{game_id}/data", update_game_data, methods=["PATCH"], name="update_game_data"),
    Route("/v1/games/{game_id}/sync", sync_game, methods=["PUT"], name="sync_game"),
    Route("/v1/games/{game_id}/history", get_game_history, methods=["GET"], name="get_game_history"),
    Route("/v1/plays", list_plays, methods=["GET"], name="list_plays"),
    Route("/v1/plays", record_play, methods=["POST"], name="record_play"),
    Route("/v1/plays/{play_id}", get_play, methods=["GET"], name="get_play"),
    Route("/v1/plays/{play_id}", update_play, methods=["PUT"], name="update_play"),
    Route("/v1/plays/{play_id}", delete_play, methods=["DELETE"], name="delete_play"),
    Route("/v1/stats/winners", get_win_stats, methods=["GET"], name="get_win_stats"),
    Route("/v1/stats/totals", get_total_stats, methods=["GET"], name="get_total_stats"),
    Route("/v1/stats/last-played", get_last_played, methods=["GET"], name="get_last_played"),
    Route("/v1/stats/recent", get_recent_plays, methods=["GET"], name="get_recent_plays"),
    Route("/v1/stats/players/{player}", get_player_stats, methods=["GET"], name="get_player_stats"),
    Route("/v1/stats/games", get_game_stats, methods=["GET"], name="get_game_stats"),
    Route("/v1/export", export_data, methods=["GET"], name="export_data"),
    Route("/v1/query", run_query, methods=["POST"], name="run_query"),
    Route("/health", health, methods=["GET"], name="health"),
]
