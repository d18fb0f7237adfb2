"""
Shared pytest fixtures for unit tests.

Uses FakeListChatModel for deterministic LLM mocking and in-memory fakes for
the timeline and email stages, so no API keys or network needed.
"""

from __future__ import annotations

import json

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage

from x_news_agent.agent.orchestrator import NewsAgent
from x_news_agent.agent.state import RunLog
from x_news_agent.core.config import Settings
from x_news_agent.core.security import limiter
from x_news_agent.schemas.schemas import NewsItem, Post
from x_news_agent.services.classifier_service import NewsClassifier, RateLimitPolicy


def verdict(score: float, is_news: bool, category: str = "Technology", headline: str = "") -> str:
    """A scoring-model reply in the shape the prompt asks for."""
    return json.dumps(
        {
            "newsScore": score,
            "category": category,
            "isNews": is_news,
            "headline": headline or f"{category} headline",
            "summary": "First sentence. Second sentence.",
        }
    )


class ScriptedChatModel:
    """Chat model double: replays replies in order, raising any Exception entries."""

    def __init__(self, replies: list[str | Exception]):
        self.replies = list(replies)
        self.prompts: list[str] = []

    async def ainvoke(self, messages):
        self.prompts.append(messages[-1].content)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return AIMessage(content=reply)


class FakeFetcher:
    def __init__(self, posts: list[Post] | None = None, error: Exception | None = None):
        self.posts = posts or []
        self.error = error
        self.calls = 0

    async def fetch_timeline(self) -> list[Post]:
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.posts)


class FakeNotifier:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.sent: list[tuple[list[NewsItem], int]] = []

    async def send_digest(self, news_items: list[NewsItem], posts_processed: int) -> None:
        if self.error:
            raise self.error
        self.sent.append((news_items, posts_processed))


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    limiter.reset()
    yield


@pytest.fixture
def settings() -> Settings:
    return Settings(
        x_api_key="consumer-key",
        x_api_secret="consumer-secret",
        x_access_token="access-token",
        x_access_token_secret="access-secret",
        email_host="smtp.example.com",
        email_user="agent@example.com",
        email_pass="app-password",
        user_email="reader@example.com",
        scoring_delay_seconds=0,
    )


@pytest.fixture
def run_log() -> RunLog:
    return RunLog()


@pytest.fixture
def sample_posts() -> list[Post]:
    return [
        Post(
            id="1001",
            text="BREAKING: Central bank raises interest rates by 50 basis points effective today.",
            author_id="u1",
            created_at="2025-01-15T10:00:00.000Z",
            public_metrics={"retweet_count": 120, "like_count": 900},
            author_username="marketwire",
            author_verified=True,
        ),
        Post(
            id="1002",
            text="Just had the best coffee of my life, highly recommend this place.",
            author_id="u2",
            created_at="2025-01-15T09:30:00.000Z",
            author_username="coffeefan",
        ),
    ]


@pytest.fixture
def make_agent(run_log, sample_posts):
    """Factory for agents with fake fetch/notify stages and a canned scorer."""

    def _make(
        posts: list[Post] | None = None,
        replies: list[str] | None = None,
        fetch_error: Exception | None = None,
        notify_error: Exception | None = None,
    ) -> NewsAgent:
        llm = FakeListChatModel(
            responses=replies or [verdict(0.9, True), verdict(0.2, False, "Other")]
        )
        return NewsAgent(
            fetcher=FakeFetcher(sample_posts if posts is None else posts, error=fetch_error),
            classifier=NewsClassifier(run_log, llm=llm, rate_limit=RateLimitPolicy(0)),
            notifier=FakeNotifier(error=notify_error),
            run_log=run_log,
        )

    return _make
