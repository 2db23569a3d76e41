"""Fake upstream handlers for gateway tests."""

import json

import httpx


def echo_handler(request: httpx.Request) -> httpx.Response:
    """Upstream that answers every request with a description of it."""
    return httpx.Response(
        200,
        json={
            "method": request.method,
            "path": request.url.path,
            "raw_path": request.url.raw_path.decode("ascii").split("?")[0],
            "query": dict(request.url.params),
            "body": json.loads(request.content) if request.content else None,
            "authorization": request.headers.get("authorization"),
        },
    )
