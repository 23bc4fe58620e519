"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from catalog_engine.catalog.store import get_catalog_store
from catalog_engine.infrastructure.config import settings

logger = structlog.get_logger()

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="catalog-engine",
        version=settings.api_version,
    )


@router.get("/ready")
async def readiness_check() -> JSONResponse:
    """Check that the catalog store answers queries.

    Returns:
        Readiness status; 503 when the store is unreachable.
    """
    try:
        async with get_catalog_store().reader() as uow:
            await uow.attributes.list_all("__readiness__")
    except Exception as e:
        logger.warning("Readiness check failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "backend": settings.catalog_backend, "error": str(e)},
        )
    return JSONResponse(content={"status": "ready", "backend": settings.catalog_backend})
