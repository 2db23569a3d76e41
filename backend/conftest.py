"""Test-wide setup: the .env.tests environment and stdlib-routed structlog."""

from pathlib import Path

import pytest
import structlog
from dotenv import load_dotenv

from shared.logging import configure_structlog

load_dotenv(Path(__file__).resolve().parent.parent / ".env.tests")

# no handlers are installed here; caplog sees the stdlib records directly
configure_structlog()


@pytest.fixture(autouse=True)
def _reset_request_context():
    """Drop request ids bound by a previous test."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
