"""Health & Readiness Checks — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if an empty unit of work cannot complete (readiness)
    - No identity headers required

Design Decisions:
    - Readiness runs a no-op transaction instead of a bare ping: it exercises the same
      path every engine operation uses, for both the SQL and in-memory stores
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from slot_scheduler.api.dependencies import Services, get_services

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness check. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "slot-scheduler-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(services: Services = Depends(get_services)):
    """Readiness check — includes store connectivity."""

    async def noop(_repos) -> None:
        return None

    try:
        await services.tx.run_in_transaction(noop)
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "store_unavailable"},
        )
    return {"status": "ready", "persistence": services.persistence}
