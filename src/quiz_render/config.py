"""Settings loaded from the environment (and an optional ``.env`` file)."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from quiz_render.core.jobs import MAX_QUESTIONS


class Settings(BaseSettings):
    """Immutable process settings. Every field can be set via its env var."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    # Location of the renderable bundle, handed to the engine untouched.
    serve_url: str = Field(default="builtin", alias="REMOTION_SERVE_URL")
    composition_id: str = "QuizVideo"
    codec: Literal["gif", "webp"] = "gif"

    # Geometry of the built-in quiz video engine.
    frame_width: int = Field(default=360, gt=0)
    frame_height: int = Field(default=640, gt=0)
    fps: int = Field(default=10, gt=0)

    telegram_bot_token: str | None = Field(default=None, alias="TELEGRAM_BOT_TOKEN")
    telegram_api_base: str = "https://api.telegram.org"
    telegram_timeout: float = Field(default=60.0, gt=0.0)

    # Longest quiz accepted by POST /renders; None accepts any length.
    max_questions: int | None = Field(default=MAX_QUESTIONS, ge=1)

    # None keeps every finished job until the process exits.
    max_finished_jobs: int | None = Field(default=None, ge=1)


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
