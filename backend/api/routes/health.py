"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shared.config import Settings
from shared.exceptions import GateKeeperError
from modules.sessions.interfaces import ISessionStore
from modules.sessions.models import SessionStats

from ..dependencies import get_app_settings, get_session_store

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    store: str
    sessions: Optional[SessionStats] = None


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=settings.app_version)


@router.get("/ready", response_model=ReadinessResponse, response_model_by_alias=True)
async def readiness_check(
    sessions: ISessionStore = Depends(get_session_store),
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Queries the session store; reports "degraded" when it is unreachable.
    """
    try:
        stats = await sessions.stats()
    except GateKeeperError as e:
        logger.error("Readiness check failed: %s", e.message)
        return ReadinessResponse(status="degraded", store="unavailable")
    return ReadinessResponse(status="ready", store="connected", sessions=stats)
