"""
Shared FastAPI dependencies for v1 API routes.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from x_news_agent.agent.orchestrator import NewsAgent
from x_news_agent.core.config import Settings, get_settings
from x_news_agent.core.security import verify_control_key


def get_agent(request: Request) -> NewsAgent:
    """The agent owned by this app instance (set in create_app or lifespan)."""
    return request.app.state.agent


# Re-export for convenience in route files
CurrentAgent = Annotated[NewsAgent, Depends(get_agent)]
ControlKey = Annotated[str | None, Depends(verify_control_key)]
AppSettings = Annotated[Settings, Depends(get_settings)]
