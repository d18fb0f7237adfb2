"""
One-shot cron entry point.

Runs a single fetch → classify → notify cycle without the HTTP server, for
hosts that prefer an external scheduler (e.g. `0 */4 * * *`).

IMPORTANT: This script must exit cleanly after completion so the cron
runner can mark the job as finished.
"""

from __future__ import annotations

import asyncio
import sys

from x_news_agent.agent.orchestrator import build_agent
from x_news_agent.core.config import get_settings
from x_news_agent.core.logging import get_logger, setup_logging

settings = get_settings()
setup_logging(settings)
logger = get_logger("cron")


async def main() -> int:
    """Run one cycle; exit code 0 only if it completed."""
    agent = build_agent(settings)
    logger.info("cron_triggered", threshold=settings.min_news_relevance)

    result = await agent.run_cycle(trigger="cron")
    if result is None:
        failure = next((e.message for e in agent.log.entries() if e.type == "error"), "unknown")
        logger.error("cron_failed", error=failure)
        return 1

    logger.info(
        "cron_completed",
        posts=result.posts_fetched,
        news_items=result.news_items,
        email_sent=result.email_sent,
    )
    return 0


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
