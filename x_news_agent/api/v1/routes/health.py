"""Health check endpoint for container healthchecks and monitoring."""

from __future__ import annotations

from fastapi import APIRouter, Request

from x_news_agent.core.config import get_settings
from x_news_agent.schemas.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/healthz/", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    settings = get_settings()
    agent = getattr(request.app.state, "agent", None)
    return HealthResponse(
        status="healthy",
        environment=settings.app_env,
        agent_running=bool(agent and agent.state.is_running),
    )
