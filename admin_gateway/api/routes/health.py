"""Health Probes — liveness and session-store readiness.

Invariants:
    - GET /api/v1/health/ answers 200 whenever the process serves requests
    - GET /api/v1/health/ready answers 503 until the session store responds

Design Decisions:
    - The data service is not probed: its outages are reported per request
      as DATA_SERVICE_* errors, while without the session store no admin can
      log in at all
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from admin_gateway.infrastructure import database

SERVICE_NAME = "admin-gateway"
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/")
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME, "version": "1.0.0"}


@router.get("/ready")
async def readiness(request: Request):
    """Session store reachable → ready; cache size reported for operators."""
    store = database.db_manager
    if store is None or not await store.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "session_store_unavailable"},
        )
    cache = getattr(request.app.state, "cache", None)
    return {
        "status": "ready",
        "checks": {"session_store": "healthy"},
        "cache_entries": len(cache) if cache is not None else 0,
    }
