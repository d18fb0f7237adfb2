"""
Pydantic v2 schemas for timeline posts, LLM verdicts and API responses.

JSON uses camelCase (newsScore, isNews, totalRuns, ...) to match the
scoring prompt and the dashboard; Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Category = Literal[
    "Technology", "Finance", "Health", "Politics", "Sports", "Entertainment", "Science", "Other"
]
CATEGORIES: tuple[str, ...] = get_args(Category)

LogType = Literal["info", "success", "error"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Timeline ────────────────────────────────────────────────
class Post(BaseModel):
    """A timeline post joined with its author's handle and verification flag."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    author_id: str = ""
    created_at: str | None = None
    public_metrics: dict[str, int] = Field(default_factory=dict)
    author_username: str = "unknown"
    author_verified: bool = False


# ── Scoring ─────────────────────────────────────────────────
class Classification(CamelModel):
    """A scoring verdict. Score and flag must be real JSON number and boolean."""

    news_score: float = Field(ge=0.0, le=1.0, strict=True)
    is_news: bool = Field(strict=True)
    category: Category = "Other"
    headline: str = ""
    summary: str = ""

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v: Any) -> str:
        return v if v in CATEGORIES else "Other"


class NewsItem(Classification):
    """A classification that passed the relevance threshold, with its post."""

    original_post: Post
    timestamp: str | None = None


# ── Run state ───────────────────────────────────────────────
class LogEntry(BaseModel):
    timestamp: datetime
    message: str
    type: LogType = "info"


class RunStats(CamelModel):
    total_runs: int = 0
    emails_sent: int = 0
    posts_processed: int = 0


class RunStatusResponse(CamelModel):
    is_running: bool
    last_run: datetime | None = None
    stats: RunStats
    cycle_in_progress: bool = False


# ── Control ─────────────────────────────────────────────────
class ControlResponse(BaseModel):
    success: bool
    message: str


# ── Health check ────────────────────────────────────────────
class HealthResponse(CamelModel):
    status: str = "healthy"
    version: str = "0.1.0"
    environment: str
    agent_running: bool = False
