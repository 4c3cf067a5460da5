"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shared.config import validate_security_settings
from shared.exceptions import ConfigurationError

from ..dependencies import ServiceContainer, get_container

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    auth: str
    database: str


@router.get("/health", response_model=HealthResponse)
async def health_check(
    container: ServiceContainer = Depends(get_container),
) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=container.settings.app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    container: ServiceContainer = Depends(get_container),
):
    """
    Readiness check endpoint.

    Reports 503 when token signing or the identity store is unavailable.
    """
    auth = "configured"
    database = "connected"
    try:
        validate_security_settings(container.settings)
    except ConfigurationError:
        auth = "misconfigured"
    try:
        container.identity_store
    except ConfigurationError as e:
        logger.warning(f"Identity store unavailable: {e.message}")
        database = "unavailable"

    ready = auth == "configured" and database == "connected"
    body = ReadinessResponse(
        status="ready" if ready else "not_ready",
        auth=auth,
        database=database,
    )
    return JSONResponse(status_code=200 if ready else 503, content=body.model_dump())
