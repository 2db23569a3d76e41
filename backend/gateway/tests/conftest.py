"""Shared fixtures for gateway tests: an app wired to a fake upstream transport."""

import httpx
import pytest

from gateway.server.app import create_app
from gateway.server.settings import GatewaySettings
from gateway.tests.helpers import echo_handler
from tracker.settings import TrackerSettings


@pytest.fixture
def make_app(tmp_path):
    static_dir = tmp_path / "public"
    (static_dir / "styles").mkdir(parents=True)
    (static_dir / "styles" / "dashboard.css").write_text("body { margin: 0; }")

    def build(handler=echo_handler, **overrides):
        settings = GatewaySettings(api_url="http://upstream.test", static_dir=str(static_dir), **overrides)
        tracker_settings = TrackerSettings(participants=["Alice", "Bob"], error_ttl_seconds=60)
        return create_app(settings, tracker_settings, transport=httpx.MockTransport(handler))

    return build
