"""
Centralised configuration via Pydantic Settings.

Reads from .env in dev and from the process environment in production.
Variable names match the original server's .env (X_API_KEY, EMAIL_HOST, ...),
so an existing .env file keeps working.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Application ─────────────────────────────────────────
    app_env: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    port: int = 3001
    cors_origins: list[str] = ["*"]

    # ── X (Twitter) API: OAuth 1.0a user context ───────────
    x_api_key: str = ""
    x_api_secret: str = ""
    x_access_token: str = ""
    x_access_token_secret: str = ""  # noqa: S105
    timeline_timeout_seconds: float = 30.0

    # ── LLM: news scoring ───────────────────────────────────
    google_api_key: str = ""
    model_scorer: str = "gemini-2.5-flash"
    scoring_max_tokens: int = 500
    scoring_delay_seconds: float = Field(
        default=0.5, description="Fixed pause after every scoring call (self-imposed rate limit)"
    )
    min_news_relevance: float = Field(
        default=0.7, description="Minimum newsScore for a post to make the digest"
    )

    # ── Email (SMTP) ────────────────────────────────────────
    email_host: str = ""
    email_port: int = 587
    email_user: str = ""
    email_pass: str = ""
    user_email: str = ""

    # ── Scheduling ──────────────────────────────────────────
    schedule_interval_hours: int = 4
    scheduler_poll_seconds: float = 30.0

    # ── Control surface ─────────────────────────────────────
    control_api_key: str = ""
    control_rate_limit: str = "10/minute"

    @field_validator("min_news_relevance")
    @classmethod
    def check_relevance(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("min_news_relevance must be between 0 and 1")
        return v

    @field_validator("scoring_delay_seconds")
    @classmethod
    def check_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("scoring_delay_seconds must not be negative")
        return v

    @property
    def has_x_credentials(self) -> bool:
        return all(
            (self.x_api_key, self.x_api_secret, self.x_access_token, self.x_access_token_secret)
        )

    @property
    def control_auth_enabled(self) -> bool:
        return bool(self.control_api_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
