"""
Agent control and status endpoints.

GET  /status  running flag, last run and cumulative stats
POST /start   activate the agent and run one cycle in the background
POST /stop    deactivate the agent (an in-flight cycle still finishes)
GET  /logs    recent run log, newest first
"""

from fastapi import APIRouter, BackgroundTasks, Request

from x_news_agent.api.v1.deps import ControlKey, CurrentAgent
from x_news_agent.core.config import get_settings
from x_news_agent.core.logging import get_logger
from x_news_agent.core.security import limiter
from x_news_agent.schemas.schemas import ControlResponse, LogEntry, RunStatusResponse

router = APIRouter(tags=["control"])
logger = get_logger(__name__)


def _control_rate_limit() -> str:
    return get_settings().control_rate_limit


@router.get("/status", response_model=RunStatusResponse)
async def get_status(agent: CurrentAgent) -> RunStatusResponse:
    return agent.status()


@router.post("/start", response_model=ControlResponse)
@limiter.limit(_control_rate_limit)
async def start_agent(
    request: Request,
    background_tasks: BackgroundTasks,
    agent: CurrentAgent,
    _api_key: ControlKey,
) -> ControlResponse:
    """Start the agent. Returns immediately; the first cycle runs in the background."""
    success, message = agent.start()
    if success:
        background_tasks.add_task(agent.run_cycle, "api")
        logger.info("agent_started", trigger="api")
    return ControlResponse(success=success, message=message)


@router.post("/stop", response_model=ControlResponse)
@limiter.limit(_control_rate_limit)
async def stop_agent(
    request: Request,
    agent: CurrentAgent,
    _api_key: ControlKey,
) -> ControlResponse:
    success, message = agent.stop()
    logger.info("agent_stopped", trigger="api")
    return ControlResponse(success=success, message=message)


@router.get("/logs", response_model=list[LogEntry])
async def get_logs(agent: CurrentAgent) -> list[LogEntry]:
    return agent.log.entries()
