"""
In-memory run state and run log for one agent instance.

Nothing here survives a restart. Each NewsAgent owns its own RunState and
RunLog, so tests can build as many independent agents as they like.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime

from x_news_agent.core.logging import get_logger
from x_news_agent.schemas.schemas import LogEntry, LogType, RunStats

logger = get_logger(__name__)

MAX_LOG_ENTRIES = 100


class RunLog:
    """Bounded history of status messages, newest first."""

    def __init__(self, max_entries: int = MAX_LOG_ENTRIES):
        # appendleft on a bounded deque evicts the oldest entry atomically
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)

    def add(self, message: str, type_: LogType = "info") -> LogEntry:
        entry = LogEntry(timestamp=datetime.now(UTC), message=message, type=type_)
        self._entries.appendleft(entry)
        log = logger.error if type_ == "error" else logger.info
        log("run_log", type=type_, message=message)
        return entry

    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class RunState:
    is_running: bool = False
    last_run: datetime | None = None
    stats: RunStats = field(default_factory=RunStats)
