"""
Structured logging via structlog.

Development gets coloured console lines, production gets JSON lines.
Everything logged during a cycle carries the cycle's `cycle_id` and
`trigger` through structlog contextvars.
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from x_news_agent.core.config import Settings, get_settings

_NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "asyncio", "schedule")


def setup_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()

    renderer: structlog.types.Processor
    if settings.app_env == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level.upper())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def cycle_context(trigger: str) -> Iterator[str]:
    """Bind a fresh cycle_id (and the trigger) to every log line in the block."""
    cycle_id = uuid.uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(cycle_id=cycle_id, trigger=trigger):
        yield cycle_id


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
