"""Shared fixtures for tracker tests."""

from unittest.mock import AsyncMock

import pytest

from shared.upstream import UpstreamClient
from tracker.state import AppState


@pytest.fixture
def client():
    return AsyncMock(spec=UpstreamClient)


@pytest.fixture
async def state():
    app_state = AppState(error_ttl_seconds=60)
    yield app_state
    await app_state.close()
