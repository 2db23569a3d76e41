"""HTTP client for the Eurogames backend API.

Every call resolves to a CallResult; transport problems never escape as
exceptions. The same client talks to the upstream API directly or to a
gateway that already wraps responses in an ApiEnvelope.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
import structlog

from shared.upstream.types import ErrorKind, Failure, Success

if TYPE_CHECKING:
    from shared.upstream.types import CallResult

logger = structlog.get_logger()

DEFAULT_TIMEOUT_SECONDS = 30.0
API_PREFIX = "/v1"


def _is_envelope(body: Any) -> bool:  # noqa: ANN401
    return isinstance(body, dict) and isinstance(body.get("success"), bool) and "status" in body


def _upstream_message(status_code: int, body: Any) -> str:  # noqa: ANN401
    detail = None
    if isinstance(body, dict):
        detail = body.get("error") or body.get("message")
    if detail:
        return f"HTTP {status_code}: {detail}"
    return f"HTTP {status_code}"


class UpstreamClient:
    def __init__(
        self,
        base_url: str,
        *,
        bearer_token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._headers: dict[str, str] = {"Content-Type": "application/json"}
        if bearer_token:
            self.set_bearer_token(bearer_token)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def set_bearer_token(self, token: str) -> None:
        self._headers["Authorization"] = f"Bearer {token}"

    def clear_auth(self) -> None:
        self._headers.pop("Authorization", None)

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,  # noqa: ANN401
        query: dict[str, str] | None = None,
    ) -> CallResult:
        """Issue one request and classify the outcome.

        Network failures and timeouts give ErrorKind.NETWORK with status 0,
        non-2xx responses give ErrorKind.UPSTREAM, and bodies that are not
        JSON give ErrorKind.MALFORMED.
        """
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, endpoint, json=body, params=query)
        except httpx.TimeoutException:
            return self._fail(endpoint, method, ErrorKind.NETWORK, f"Request timed out after {self._timeout:g}s")
        except httpx.RequestError as e:
            return self._fail(endpoint, method, ErrorKind.NETWORK, str(e) or "Network error")

        status_code = response.status_code
        if not response.content:
            payload = None
        else:
            try:
                payload = response.json()
            except ValueError:
                return self._fail(
                    endpoint,
                    method,
                    ErrorKind.MALFORMED,
                    f"Malformed response body (HTTP {status_code})",
                    status_code,
                )

        if _is_envelope(payload):
            envelope_status = payload["status"] if isinstance(payload["status"], int) else status_code
            if payload["success"]:
                return Success(value=payload.get("data"), status_code=envelope_status)
            return self._fail(
                endpoint,
                method,
                ErrorKind.UPSTREAM,
                payload.get("error") or f"HTTP {envelope_status}",
                envelope_status,
            )

        if not response.is_success:
            return self._fail(endpoint, method, ErrorKind.UPSTREAM, _upstream_message(status_code, payload), status_code)
        return Success(value=payload, status_code=status_code)

    def _fail(
        self,
        endpoint: str,
        method: str,
        kind: ErrorKind,
        message: str,
        status_code: int = 0,
    ) -> Failure:
        logger.warning(
            "upstream call failed",
            endpoint=endpoint,
            method=method,
            error_kind=kind,
            status_code=status_code,
            message=message,
        )
        return Failure(error_kind=kind, message=message, status_code=status_code)

    # games

    async def list_games(self, query: dict[str, str] | None = None) -> CallResult:
        return await self.call(f"{API_PREFIX}/games", query=query)

    async def get_game(self, game_id: str) -> CallResult:
        return await self.call(f"{API_PREFIX}/games/{quote(game_id, safe='')}")

    async def add_game(self, external_id: int) -> CallResult:
        return await self.call(f"{API_PREFIX}/games", "POST", {"bggId": external_id})

    async def update_game_notes(self, game_id: str, notes: str) -> CallResult:
        return await self.call(f"{API_PREFIX}/games/{quote(game_id, safe='')}/notes", "PATCH", {"notes": notes})

    async def update_game_data(self, game_id: str, data: dict[str, Any]) -> CallResult:
        return await self.call(f"{API_PREFIX}/games/{quote(game_id, safe='')}/data", "PATCH", {"data": data})

    async def sync_game(self, game_id: str) -> CallResult:
        return await self.call(f"{API_PREFIX}/games/{quote(game_id, safe='')}/sync", "PUT", {})

    async def get_game_history(self, game_id: str) -> CallResult:
        return await self.call(f"{API_PREFIX}/games/{quote(game_id, safe='')}/history")

    # plays

    async def list_plays(self, query: dict[str, str] | None = None) -> CallResult:
        return await self.call(f"{API_PREFIX}/plays", query=query)

    async def record_play(self, play: dict[str, Any]) -> CallResult:
        return await self.call(f"{API_PREFIX}/plays", "POST", play)

    async def get_play(self, play_id: str) -> CallResult:
        return await self.call(f"{API_PREFIX}/plays/{quote(play_id, safe='')}")

    async def update_play(self, play_id: str, updates: dict[str, Any]) -> CallResult:
        return await self.call(f"{API_PREFIX}/plays/{quote(play_id, safe='')}", "PUT", updates)

    async def delete_play(self, play_id: str) -> CallResult:
        return await self.call(f"{API_PREFIX}/plays/{quote(play_id, safe='')}", "DELETE")

    # statistics

    async def get_win_stats(self) -> CallResult:
        return await self.call(f"{API_PREFIX}/stats/winners")

    async def get_total_stats(self) -> CallResult:
        return await self.call(f"{API_PREFIX}/stats/totals")

    async def get_last_played(self) -> CallResult:
        return await self.call(f"{API_PREFIX}/stats/last-played")

    async def get_recent_plays(self, limit: int | None = None) -> CallResult:
        query = {"limit": str(limit)} if limit else None
        return await self.call(f"{API_PREFIX}/stats/recent", query=query)

    async def get_player_stats(self, player: str) -> CallResult:
        return await self.call(f"{API_PREFIX}/stats/players/{quote(player, safe='')}")

    async def get_game_stats(self) -> CallResult:
        return await self.call(f"{API_PREFIX}/stats/games")

    # utilities

    async def export_data(self) -> CallResult:
        return await self.call(f"{API_PREFIX}/export")

    async def query(self, sql: str) -> CallResult:
        return await self.call(f"{API_PREFIX}/query", "POST", {"sql": sql})
