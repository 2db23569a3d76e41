"""Jinja2 template factory for the dashboard pages."""

from __future__ import annotations

from pathlib import Path

from starlette.templating import Jinja2Templates

from tracker.state import View

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

VIEW_PATHS = {
    View.GAMES: "/games",
    View.PLAYS: "/plays",
    View.LAST_PLAYED: "/last-played",
    View.STATS: "/stats",
}


def format_percent(rate: float) -> str:
    return f"{rate * 100:.0f}%"


def create_templates() -> Jinja2Templates:
    """Create Jinja2 template engine for dashboard HTML templates."""
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.globals["view_paths"] = VIEW_PATHS
    templates.env.filters["percent"] = format_percent
    return templates
