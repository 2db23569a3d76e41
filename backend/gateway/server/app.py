from __future__ import annotations

import contextlib
from http import HTTPStatus
from pathlib import Path
from typing import TYPE_CHECKING, cast

import structlog
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from gateway.server.middleware import RequestLoggingMiddleware, SlashNormalizationMiddleware
from gateway.server.proxy import API_ROUTES, BadRequestError, envelope_response
from gateway.server.settings import GatewaySettings
from gateway.views import create_templates, handlers
from shared.logging import setup_logging
from shared.upstream import ApiEnvelope, UpstreamClient
from tracker.session import TrackerSession
from tracker.settings import TrackerSettings
from tracker.sorting import use_system_collation

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    import httpx
    from starlette.requests import Request
    from starlette.responses import Response


async def _bad_request_handler(_request: Request, exc: Exception) -> Response:
    error = cast("BadRequestError", exc)
    return envelope_response(ApiEnvelope.failure(error.message, int(HTTPStatus.BAD_REQUEST)))


async def _http_error_handler(_request: Request, exc: Exception) -> Response:
    """Answer routing errors (unknown path, wrong method) with a failure envelope."""
    http_exc = cast("HTTPException", exc)
    response = envelope_response(ApiEnvelope.failure(http_exc.detail or "", http_exc.status_code))
    if http_exc.headers:
        response.headers.update(http_exc.headers)
    return response


async def _server_error_handler(request: Request, exc: Exception) -> Response:
    logger.error("unhandled error", path=request.url.path, error=str(exc), exc_info=exc)
    return envelope_response(ApiEnvelope.failure("Internal Server Error", int(HTTPStatus.INTERNAL_SERVER_ERROR)))


DASHBOARD_ROUTES = [
    Route("/", handlers.index, methods=["GET"], name="index"),
    Route("/games", handlers.games_page, methods=["GET"], name="games_page"),
    Route("/games", handlers.add_game, methods=["POST"], name="add_game_form"),
    Route("/games/{game_id}", handlers.game_page, methods=["GET"], name="game_page"),
    Route("/games/{game_id}/notes", handlers.update_notes, methods=["POST"], name="update_notes_form"),
    Route("/games/{game_id}/sync", handlers.sync_game, methods=["POST"], name="sync_game_form"),
    Route("/plays", handlers.plays_page, methods=["GET"], name="plays_page"),
    Route("/plays", handlers.record_play, methods=["POST"], name="record_play_form"),
    Route("/plays/delete/cancel", handlers.cancel_delete_play, methods=["POST"], name="cancel_delete_play"),
    Route("/plays/{play_id}/delete", handlers.request_delete_play, methods=["POST"], name="request_delete_play"),
    Route(
        "/plays/{play_id}/delete/confirm",
        handlers.confirm_delete_play,
        methods=["POST"],
        name="confirm_delete_play",
    ),
    Route("/last-played", handlers.last_played_page, methods=["GET"], name="last_played_page"),
    Route("/stats", handlers.stats_page, methods=["GET"], name="stats_page"),
    Route("/stats/players/{player}", handlers.player_page, methods=["GET"], name="player_page"),
    Route("/refresh", handlers.refresh, methods=["POST"], name="refresh"),
    Route("/error/dismiss", handlers.dismiss_error, methods=["POST"], name="dismiss_error"),
]


def create_app(
    settings: GatewaySettings | None = None,
    tracker_settings: TrackerSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = GatewaySettings()
    if tracker_settings is None:  # pragma: no cover
        tracker_settings = TrackerSettings()

    static_dir = Path(settings.static_dir).resolve()

    routes = [*API_ROUTES, *DASHBOARD_ROUTES]
    if static_dir.is_dir():
        routes.append(Mount("/static", app=StaticFiles(directory=str(static_dir)), name="static"))
    else:
        logger.warning("static directory not found, /static/ will not be served", path=str(static_dir))

    upstream = UpstreamClient(
        settings.api_url,
        bearer_token=settings.api_key,
        timeout=settings.request_timeout_seconds,
        transport=transport,
    )
    if settings.api_key is None:
        logger.warning("no API key configured, upstream requests are unauthenticated")
    tracker = TrackerSession(upstream, tracker_settings)

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:
        yield
        await tracker.close()

    app = Starlette(
        routes=routes,
        lifespan=lifespan,
        exception_handlers={
            BadRequestError: _bad_request_handler,
            HTTPException: _http_error_handler,
            Exception: _server_error_handler,
        },
    )
    app.add_middleware(SlashNormalizationMiddleware)  # type: ignore[arg-type]
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins or ["*"],
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestLoggingMiddleware)  # type: ignore[arg-type]

    app.state.settings = settings
    app.state.upstream = upstream
    app.state.tracker = tracker
    app.state.templates = create_templates()

    logger.info("gateway server ready", api_url=settings.api_url)
    return app


def get_app() -> Starlette:  # pragma: no cover  # deadcode: ignore
    """Factory function for uvicorn --factory gateway.server.app:get_app."""
    s = GatewaySettings()
    setup_logging(log_dir=s.log_dir)
    collation = use_system_collation()
    if collation is None:
        logger.warning("system collation locale unavailable, sorting by base letters only")
    return create_app(settings=s, tracker_settings=TrackerSettings())
