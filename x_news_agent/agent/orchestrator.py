"""
Cycle orchestrator: fetch → classify → notify, once per cycle.

Flow:
  fetch timeline → classify (threshold 0.7) → email digest if any news
  → update stats

A failure at any stage is caught at the cycle boundary, logged and
swallowed, so the agent stays eligible for the next trigger. At most one
cycle runs at a time; a trigger that lands mid-cycle is skipped.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime

from x_news_agent.agent.state import RunLog, RunState
from x_news_agent.core.config import Settings, get_settings
from x_news_agent.core.logging import cycle_context, get_logger
from x_news_agent.schemas.schemas import RunStatusResponse
from x_news_agent.services.classifier_service import (
    DEFAULT_MIN_NEWS_RELEVANCE,
    NewsClassifier,
    RateLimitPolicy,
)
from x_news_agent.services.email_service import EmailService
from x_news_agent.services.timeline_service import TimelineService

logger = get_logger(__name__)


@dataclass(frozen=True)
class CycleResult:
    posts_fetched: int
    news_items: int
    email_sent: bool


class NewsAgent:
    def __init__(
        self,
        fetcher: TimelineService,
        classifier: NewsClassifier,
        notifier: EmailService,
        run_log: RunLog,
        state: RunState | None = None,
        min_news_relevance: float = DEFAULT_MIN_NEWS_RELEVANCE,
        interval_hours: int = 4,
    ):
        self.fetcher = fetcher
        self.classifier = classifier
        self.notifier = notifier
        self.log = run_log
        self.state = state or RunState()
        self.min_news_relevance = min_news_relevance
        self.interval_hours = interval_hours
        self._cycle_lock = asyncio.Lock()

    @property
    def cycle_in_progress(self) -> bool:
        return self._cycle_lock.locked()

    # ── Control ─────────────────────────────────────────────
    def start(self) -> tuple[bool, str]:
        """Mark the agent active. The caller kicks off the first cycle."""
        if self.state.is_running:
            return False, "Agent already running"
        self.state.is_running = True
        self.log.add("Agent started via API", "success")
        return True, "Agent started successfully"

    def stop(self) -> tuple[bool, str]:
        """Mark the agent inactive. A cycle already in flight runs to completion."""
        self.state.is_running = False
        self.log.add("Agent stopped via API", "info")
        return True, "Agent stopped"

    def status(self) -> RunStatusResponse:
        return RunStatusResponse(
            is_running=self.state.is_running,
            last_run=self.state.last_run,
            stats=self.state.stats.model_copy(),
            cycle_in_progress=self.cycle_in_progress,
        )

    async def scheduled_tick(self) -> CycleResult | None:
        """Periodic trigger callback; no-op while the agent is stopped."""
        if not self.state.is_running:
            return None
        self.log.add(f"Scheduled cycle triggered (every {self.interval_hours} hours)", "info")
        return await self.run_cycle(trigger="scheduled")

    # ── Cycle ───────────────────────────────────────────────
    async def run_cycle(self, trigger: str = "manual") -> CycleResult | None:
        """Run one cycle. Returns None if it was skipped or failed."""
        if self._cycle_lock.locked():
            self.log.add("Cycle already in progress, skipping.", "info")
            return None

        async with self._cycle_lock:
            with cycle_context(trigger):
                try:
                    return await self._run_stages()
                except Exception as e:
                    self.log.add(f"Agent cycle failed: {e}", "error")
                    logger.error("cycle_failed", error=str(e), error_type=type(e).__name__)
                    return None

    async def _run_stages(self) -> CycleResult:
        self.log.add("Starting new agent cycle...", "info")
        stats = self.state.stats

        posts = await self.fetcher.fetch_timeline()
        news_items = await self.classifier.classify(posts, self.min_news_relevance)

        email_sent = False
        if news_items:
            await self.notifier.send_digest(
                news_items, posts_processed=stats.posts_processed + len(posts)
            )
            stats.emails_sent += 1
            email_sent = True
        else:
            self.log.add("No significant news found this cycle. No email sent.", "info")

        stats.total_runs += 1
        stats.posts_processed += len(posts)
        self.state.last_run = datetime.now(UTC)
        self.log.add(f"Next check scheduled in {self.interval_hours} hours.", "info")

        logger.info(
            "cycle_completed",
            posts=len(posts),
            news_items=len(news_items),
            email_sent=email_sent,
            total_runs=stats.total_runs,
        )
        return CycleResult(
            posts_fetched=len(posts), news_items=len(news_items), email_sent=email_sent
        )


def build_agent(settings: Settings | None = None) -> NewsAgent:
    """Wire the production agent: X timeline, Gemini scorer, SMTP digest."""
    settings = settings or get_settings()
    run_log = RunLog()
    return NewsAgent(
        fetcher=TimelineService(settings, run_log),
        classifier=NewsClassifier(
            run_log,
            rate_limit=RateLimitPolicy(settings.scoring_delay_seconds),
            settings=settings,
        ),
        notifier=EmailService(settings, run_log),
        run_log=run_log,
        min_news_relevance=settings.min_news_relevance,
        interval_hours=settings.schedule_interval_hours,
    )
