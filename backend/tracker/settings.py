"""Tracker engine configuration via environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from shared.validators import StringListEnvSettingsSource, parse_string_list
from tracker.models import DRAW

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


class TrackerSettings(BaseSettings):
    model_config = {"env_prefix": "TRACKER_"}

    # The two named players tracked in the win statistics
    participants: list[str] = ["Alice", "Bob"]
    draw_label: str = Field(default=DRAW, min_length=1)
    error_ttl_seconds: float = Field(default=5.0, gt=0)
    plays_limit: int = Field(default=50, ge=1)
    recent_limit: int = Field(default=10, ge=1)

    @field_validator("participants", mode="before")
    @classmethod
    def validate_participants(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, StringListEnvSettingsSource(settings_cls), dotenv_settings, file_secret_settings
