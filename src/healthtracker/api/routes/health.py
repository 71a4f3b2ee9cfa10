"""
Health Check Endpoints

Liveness and readiness probes plus a component summary.
Health checks report status; they never raise.
"""

import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from healthtracker import __version__
from healthtracker.api.dependencies import get_firebase, get_llm_provider, get_sms_gateway
from healthtracker.config.logging_config import get_logger
from healthtracker.infrastructure.database import get_db_manager

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


class HealthStatus(BaseModel):
    """Health check response."""

    status: str  # healthy, degraded, unhealthy
    timestamp: str
    version: str = __version__
    checks: dict[str, dict] = Field(default_factory=dict)


_startup_time: Optional[datetime] = None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def mark_startup_complete() -> None:
    global _startup_time
    _startup_time = datetime.now(timezone.utc)
    logger.info("Application startup complete")


@router.get("/live", response_model=HealthStatus)
async def liveness() -> HealthStatus:
    """
    Liveness probe.

    Always 200 while the process can serve requests.
    """
    return HealthStatus(
        status="healthy",
        timestamp=_now(),
        checks={"process": {"status": "alive"}},
    )


@router.get("/ready", response_model=HealthStatus)
async def readiness(response: Response) -> HealthStatus:
    """
    Readiness probe.

    503 until the database answers; external APIs only degrade.
    """
    checks = {
        "database": await _check_database(),
        "llm": _check_llm(),
    }
    overall = _overall(checks)
    if overall != "healthy":
        response.status_code = 503

    return HealthStatus(status=overall, timestamp=_now(), checks=checks)


@router.get("", response_model=HealthStatus)
async def health_summary(response: Response) -> HealthStatus:
    """Status of every component the API depends on."""
    checks = {
        "database": await _check_database(),
        "llm": _check_llm(),
        "sms": _configured("Twilio", get_sms_gateway().is_configured()),
        "firebase": _configured("Firebase Admin", get_firebase().is_initialized),
        "startup": {
            "status": "complete" if _startup_time else "in_progress",
            "started_at": _startup_time.isoformat() if _startup_time else None,
        },
    }

    overall = _overall(checks)
    if overall == "unhealthy":
        response.status_code = 503

    return HealthStatus(status=overall, timestamp=_now(), checks=checks)


def _overall(checks: dict[str, dict]) -> str:
    statuses = [c.get("status") for c in checks.values()]
    if "unhealthy" in statuses:
        return "unhealthy"
    if "degraded" in statuses:
        return "degraded"
    return "healthy"


async def _check_database() -> dict:
    manager = get_db_manager()
    if not manager.is_initialized:
        return {"status": "unhealthy", "message": "Database not initialized"}

    start = time.perf_counter()
    if not await manager.health_check():
        return {"status": "unhealthy", "message": "Database connection failed"}
    return {"status": "healthy", "latency_ms": int((time.perf_counter() - start) * 1000)}


def _check_llm() -> dict:
    provider = get_llm_provider()
    if not provider.is_configured():
        return {"status": "degraded", "message": "LLM provider not configured"}
    return {"status": "healthy", "provider": provider.provider_name}


def _configured(name: str, ok: bool) -> dict:
    if ok:
        return {"status": "healthy"}
    return {"status": "degraded", "message": f"{name} not configured"}
