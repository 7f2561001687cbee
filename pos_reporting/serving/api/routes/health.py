"""
Health Check Endpoints

Liveness, readiness and store connectivity.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from pos_reporting.config import get_settings
from pos_reporting.database.connection import check_database_health

settings = get_settings()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Service health.

    Checks:
    - Store connectivity and latency
    - Summary cache size
    """
    checks: Dict[str, Any] = {}
    overall_status = "healthy"

    db_health = await check_database_health()
    checks["database"] = db_health
    if db_health.get("status") != "healthy":
        overall_status = "degraded"

    service = getattr(request.app.state, "report_service", None)
    cache = service.summary_cache if service is not None else None
    checks["summary_cache"] = {
        "enabled": cache is not None,
        "entries": len(cache) if cache is not None else 0,
    }

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Returns 200 while the process is running."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """Returns 200 when the store is reachable, 503 otherwise."""
    db_health = await check_database_health()

    if db_health.get("status") != "healthy":
        response.status_code = 503
        return {"status": "not_ready", "reason": "database_unavailable"}

    return {"status": "ready"}
