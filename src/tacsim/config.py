"""Lightweight configuration for the tactical simulator service."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, overridable through ``TACSIM_*`` variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="TACSIM_", env_file=".env", env_file_encoding="utf-8"
    )

    tick_interval_seconds: float = Field(
        default=0.1,
        description="Real-time seconds between automatic ticks when scheduling is enabled",
        gt=0.0,
    )
    ai_interval_seconds: float = Field(
        default=2.0,
        description="Simulated seconds between two AI planning cycles",
        gt=0.0,
    )
    default_seed: int = Field(default=1, description="Seed used when a session does not supply one")
    default_mission: str = Field(default="mission-1", description="Mission loaded by default")
    allowed_speeds: tuple[int, ...] = Field(
        default=(1, 2, 4), description="Game speed multipliers accepted by the control surface"
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
