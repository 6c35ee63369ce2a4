"""Health & Readiness — liveness plus the checks the catalog needs to serve.

Invariants:
    - GET /health/ returns 200 whenever the process answers
    - GET /health/ready returns 200 only when the database answers a ping
      and the notification broker accepts subscriptions; otherwise 503 with
      every failing check listed in "reasons"
    - The broker check reports live book_added subscribers
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

import catalog.infrastructure.database as db_module
from catalog.core.domain_types import EventTopic

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "healthy", "service": "library-catalog-api"}


@router.get("/ready")
async def readiness(request: Request):
    reasons = []

    manager = db_module.db_manager
    latency_ms = await manager.ping() if manager else None
    if latency_ms is None:
        reasons.append("database_unavailable")
        database = {"status": "unavailable"}
    else:
        database = {"status": "healthy", "latency_ms": latency_ms}

    broker = getattr(request.app.state, "broker", None)
    if broker is None or not broker.running:
        reasons.append("broker_shut_down")
        notifications = {"status": "shut_down"}
    else:
        notifications = {
            "status": "running",
            "subscribers": broker.subscriber_count(EventTopic.BOOK_ADDED),
        }

    checks = {"database": database, "notifications": notifications}
    if reasons:
        logger.warning(f"Readiness failed: {', '.join(reasons)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reasons": reasons, "checks": checks},
        )
    return {"status": "ready", "checks": checks}
