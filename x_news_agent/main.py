"""
FastAPI application entry point.

Configures middleware, lifespan events (agent wiring + 4-hourly scheduler),
and mounts all routers.
Run locally: uvicorn x_news_agent.main:app --reload --port 3001
Production:  python -m x_news_agent.main
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from x_news_agent.agent.orchestrator import NewsAgent, build_agent
from x_news_agent.agent.scheduler import CycleScheduler
from x_news_agent.api.v1.routes import control, health
from x_news_agent.core.config import get_settings
from x_news_agent.core.logging import get_logger, setup_logging
from x_news_agent.core.security import limiter

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown events."""
    setup_logging(settings)
    if app.state.agent is None:
        app.state.agent = build_agent(settings)
    agent: NewsAgent = app.state.agent

    scheduler = CycleScheduler(
        agent,
        interval_hours=settings.schedule_interval_hours,
        poll_seconds=settings.scheduler_poll_seconds,
    )
    scheduler.start()
    app.state.scheduler = scheduler

    logger.info("app_starting", environment=settings.app_env, port=settings.port)
    agent.log.add(f"Server started on port {settings.port}", "success")

    yield

    agent.log.add("Server shutting down...", "info")
    await scheduler.stop()
    logger.info("app_shutting_down")


def create_app(agent: NewsAgent | None = None) -> FastAPI:
    """Build the app. Pass an agent to inject one; otherwise lifespan wires it."""
    app = FastAPI(
        title="X News Agent",
        description="Scores X timeline posts for newsworthiness and emails a digest",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.app_env != "production" else None,
        redoc_url="/redoc" if settings.app_env != "production" else None,
    )
    app.state.agent = agent

    # ── Middleware ──────────────────────────────────────────────
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Rate limiting ──────────────────────────────────────────
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # ── Routes ─────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(control.router)
    # The dashboard calls the same routes under /api
    app.include_router(control.router, prefix="/api")

    @app.get("/")
    async def root():
        return {
            "service": "X News Agent",
            "version": "0.1.0",
            "docs": "/docs",
            "health": "/healthz/",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("x_news_agent.main:app", host="0.0.0.0", port=settings.port)  # noqa: S104
