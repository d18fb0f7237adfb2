"""
Periodic trigger: runs NewsAgent.scheduled_tick on clock-aligned hours.

With the default interval of 4 the ticks land at 00:00, 04:00, 08:00, ...
local time, the same as a `0 */4 * * *` crontab, whatever time the server
started. A private `schedule.Scheduler` holds one daily job per slot; an
asyncio task started from the app lifespan polls it. Each firing spawns the
tick on the event loop so a long cycle never blocks the poll loop.
"""

from __future__ import annotations

import asyncio
import contextlib

import schedule

from x_news_agent.agent.orchestrator import NewsAgent
from x_news_agent.core.logging import get_logger

logger = get_logger(__name__)


def slot_hours(interval_hours: int) -> list[int]:
    """Hours of the day a `*/interval_hours` cron hour field matches."""
    if interval_hours < 1:
        raise ValueError(f"interval_hours must be at least 1, got {interval_hours}")
    return list(range(0, 24, interval_hours))


class CycleScheduler:
    def __init__(self, agent: NewsAgent, interval_hours: int = 4, poll_seconds: float = 30.0):
        self.agent = agent
        self.interval_hours = interval_hours
        self.poll_seconds = poll_seconds
        self._scheduler = schedule.Scheduler()
        self.jobs = [
            self._scheduler.every().day.at(f"{hour:02d}:00").do(self._fire)
            for hour in slot_hours(interval_hours)
        ]
        self._poller: asyncio.Task | None = None
        self._ticks: set[asyncio.Task] = set()

    @property
    def next_run(self):
        return self._scheduler.next_run

    def _fire(self) -> None:
        task = asyncio.get_running_loop().create_task(self.agent.scheduled_tick())
        self._ticks.add(task)
        task.add_done_callback(self._ticks.discard)

    def run_pending(self) -> None:
        self._scheduler.run_pending()

    async def _poll(self) -> None:
        while True:
            self.run_pending()
            await asyncio.sleep(self.poll_seconds)

    def start(self) -> None:
        if self._poller is None:
            self._poller = asyncio.get_running_loop().create_task(self._poll())
            logger.info(
                "scheduler_started",
                interval_hours=self.interval_hours,
                slots=len(self.jobs),
                next_run=str(self.next_run),
            )

    async def stop(self) -> None:
        if self._poller is None:
            return
        self._poller.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._poller
        self._poller = None
        self._scheduler.clear()
        logger.info("scheduler_stopped")
