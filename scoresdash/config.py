"""Load .env and settings.yaml, expose all configuration."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from scoresdash.leagues import LEAGUE_ORDER, League

log = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _load_env() -> None:
    env_path = PROJECT_ROOT / ".env"
    load_dotenv(env_path)


def _load_yaml() -> dict:
    settings_path = PROJECT_ROOT / "settings.yaml"
    if settings_path.exists():
        try:
            with open(settings_path) as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError:
            log.warning("Failed to parse settings.yaml, using defaults")
            return {}
    return {}


class Settings(BaseModel):
    leagues: list[League] = Field(default_factory=lambda: list(LEAGUE_ORDER))

    # Refresh cycle
    refresh_interval: float = 30
    request_timeout: float = 15.0
    # A live game or one starting inside this window counts as active.
    active_window_minutes: int = 30
    # Upcoming games inside this window get a "Starts in" countdown.
    upcoming_window_minutes: int = 45
    next_game_days: int = 6
    probe_cache_ttl: int = 600

    # Odds
    excluded_odds_provider: str = "41"
    odds_max_concurrent: int | None = None

    # Auto-scroll
    scroll_speed_ms: int = 2000
    scroll_min_ms: int = 100
    scroll_max_ms: int = 2000
    scroll_step_ms: int = 100
    scroll_reset_interval: float = 100

    shutdown_grace: float = 0.03
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("odds_max_concurrent")
    @classmethod
    def positive_cap(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            return None
        return v

    @model_validator(mode="after")
    def check_windows(self) -> "Settings":
        if self.upcoming_window_minutes < self.active_window_minutes:
            raise ValueError("upcoming_window_minutes must be >= active_window_minutes")
        return self

    @model_validator(mode="after")
    def clamp_scroll(self) -> "Settings":
        if self.scroll_min_ms <= 0:
            raise ValueError("scroll_min_ms must be positive")
        if self.scroll_max_ms < self.scroll_min_ms:
            raise ValueError("scroll_max_ms must be >= scroll_min_ms")
        self.scroll_speed_ms = max(
            self.scroll_min_ms, min(self.scroll_speed_ms, self.scroll_max_ms)
        )
        return self


def load_settings() -> Settings:
    _load_env()
    raw = _load_yaml()
    level = os.getenv("SCORESDASH_LOG_LEVEL")
    if level:
        raw["log_level"] = level
    return Settings(**raw)
