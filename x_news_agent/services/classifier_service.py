"""
News classifier: scores each timeline post for newsworthiness with an LLM.

Posts are scored one at a time, in order, with a fixed pause after every
scoring call. A post whose call fails or whose reply cannot be parsed is
logged and skipped; the rest of the batch carries on.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import ValidationError

from x_news_agent.agent.state import RunLog
from x_news_agent.core.config import Settings, get_settings
from x_news_agent.core.errors import ClassifyError
from x_news_agent.core.logging import get_logger
from x_news_agent.core.security import sanitize_for_display
from x_news_agent.schemas.schemas import CATEGORIES, Classification, NewsItem, Post

logger = get_logger(__name__)

DEFAULT_MIN_NEWS_RELEVANCE = 0.7
PREVIEW_CHARS = 50

SCORING_PROMPT = """Analyze this X post for newsworthiness. Rate from 0-1 where 1 is breaking news.
Consider: breaking news, market updates, tech developments, health research, political developments.

Post: "{text}"
Author: @{author}
Verified: {verified}

Respond with JSON only:
{{
  "newsScore": number,
  "category": "{categories}",
  "isNews": boolean,
  "headline": "brief headline if newsworthy",
  "summary": "2-sentence summary if newsworthy"
}}

DO NOT OUTPUT ANYTHING OTHER THAN VALID JSON."""

_FENCE_OPEN = re.compile(r"```json\n?")
_FENCE_ANY = re.compile(r"```\n?")


@dataclass(frozen=True)
class RateLimitPolicy:
    """Fixed pause after each scoring call. Not adaptive, no backoff."""

    delay_seconds: float = 0.5

    async def pause(self) -> None:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)


def build_prompt(post: Post) -> str:
    return SCORING_PROMPT.format(
        text=sanitize_for_display(post.text),
        author=post.author_username,
        verified=str(post.author_verified).lower(),
        categories="|".join(CATEGORIES),
    )


def strip_code_fences(text: str) -> str:
    """Remove ```json / ``` markers the model sometimes wraps its reply in."""
    text = _FENCE_OPEN.sub("", text)
    text = _FENCE_ANY.sub("", text)
    return text.strip()


def parse_classification(raw_text: str, post_id: str = "") -> Classification:
    """Parse a model reply into a Classification. Raises ClassifyError."""
    try:
        return Classification.model_validate_json(strip_code_fences(raw_text))
    except ValidationError as e:
        raise ClassifyError(post_id, "unparsable", str(e)) from e


def build_scoring_model(settings: Settings) -> BaseChatModel:
    return ChatGoogleGenerativeAI(
        model=settings.model_scorer,
        temperature=0,
        max_output_tokens=settings.scoring_max_tokens,
        google_api_key=settings.google_api_key,
    )


def _response_text(content: str | list) -> str:
    if isinstance(content, str):
        return content
    # Multi-part replies: keep the text blocks only
    return "".join(
        part.get("text", "") if isinstance(part, dict) else str(part) for part in content
    )


class NewsClassifier:
    def __init__(
        self,
        run_log: RunLog,
        llm: BaseChatModel | None = None,
        rate_limit: RateLimitPolicy | None = None,
        settings: Settings | None = None,
    ):
        self.run_log = run_log
        self.rate_limit = rate_limit or RateLimitPolicy()
        self._llm = llm
        self._settings = settings

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = build_scoring_model(self._settings or get_settings())
        return self._llm

    async def classify(
        self,
        posts: list[Post],
        min_news_relevance: float = DEFAULT_MIN_NEWS_RELEVANCE,
    ) -> list[NewsItem]:
        """Return the posts that are news with newsScore >= min_news_relevance."""
        self.run_log.add("Starting AI analysis of posts...", "info")
        news_items: list[NewsItem] = []
        skipped = 0

        for post in posts:
            try:
                analysis = await self._score(post)
            except ClassifyError as e:
                skipped += 1
                self._log_failure(e)
                continue
            finally:
                await self.rate_limit.pause()

            verdict = "NEWS" if analysis.is_news else "Skip"
            self.run_log.add(
                f"@{post.author_username}: {post.text[:PREVIEW_CHARS]}... "
                f"| Score: {analysis.news_score} {verdict}",
                "info",
            )
            if analysis.is_news and analysis.news_score >= min_news_relevance:
                news_items.append(
                    NewsItem(
                        **analysis.model_dump(),
                        original_post=post,
                        timestamp=post.created_at,
                    )
                )

        self.run_log.add(
            f"AI analysis complete. Found {len(news_items)} newsworthy items.", "success"
        )
        logger.info(
            "classification_complete",
            posts=len(posts),
            news_items=len(news_items),
            skipped=skipped,
            threshold=min_news_relevance,
        )
        return news_items

    async def _score(self, post: Post) -> Classification:
        try:
            response = await self.llm.ainvoke([HumanMessage(content=build_prompt(post))])
        except Exception as e:
            raise ClassifyError(post.id, "scoring_failed", str(e)) from e
        return parse_classification(_response_text(response.content), post.id)

    def _log_failure(self, error: ClassifyError) -> None:
        if error.reason == "scoring_failed":
            self.run_log.add(f"Scoring API error for post {error.post_id}", "error")
        else:
            self.run_log.add(f"Failed to parse AI response for post {error.post_id}", "error")
        logger.warning(
            "classification_skipped",
            post_id=error.post_id,
            reason=error.reason,
            error=error.message,
        )
