"""
MedWell Backend — Liveness and Health Routes
==============================================

GET /        plain-text liveness string for uptime monitors
GET /health  document store ping + completion provider configuration
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from medwell import __version__
from medwell.database import MongoConnector, get_connector
from medwell.schemas.common import HealthResponse
from medwell.services.llm_base import CompletionService, get_completion_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()

LIVENESS_TEXT = "AI Health Assistant Backend is running!"


@router.get("/", response_class=PlainTextResponse, summary="Liveness check")
async def root() -> str:
    return LIVENESS_TEXT


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Reports document store connectivity and whether the completion provider is configured.",
)
async def health_check(
    connector: MongoConnector = Depends(get_connector),
    provider: CompletionService = Depends(get_completion_service),
) -> HealthResponse:
    """
    Status levels:
        healthy:    store reachable and provider configured
        degraded:   store reachable, provider missing credentials
        unhealthy:  store unreachable
    """
    db_ok = await connector.ping()
    llm_ok = provider.is_configured

    if not db_ok:
        overall = "unhealthy"
    elif not llm_ok:
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(
        status=overall,
        version=__version__,
        database="connected" if db_ok else "disconnected",
        llm="configured" if llm_ok else "not_configured",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
