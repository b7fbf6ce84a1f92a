"""
RoMod - Health Router
=====================

Health check and system status endpoints.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import os
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Request

from src.core.database import get_db
from src.core.logger import logger
from src.api.models.base import APIResponse, HealthResponse
from src.api.services.websocket import get_ws_manager


router = APIRouter(prefix="/health", tags=["Health"])

# Track startup time
_start_time = time.time()


def _database_ok() -> bool:
    try:
        get_db().fetchone("SELECT 1")
        return True
    except Exception as e:
        logger.warning("Health Check DB Failed", [("Error", str(e)[:100])])
        return False


@router.get("", response_model=APIResponse[dict])
async def health_check() -> APIResponse[dict]:
    """
    Basic health check endpoint.

    Returns simple status for load balancers and monitoring.
    """
    return APIResponse(
        success=True,
        data={
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.get("/detailed", response_model=APIResponse[HealthResponse])
async def detailed_health(request: Request) -> APIResponse[HealthResponse]:
    """Detailed status including storage, fan-out and relay backlog."""
    import psutil

    process = psutil.Process(os.getpid())
    memory_mb = process.memory_info().rss / (1024 * 1024)

    db_connected = _database_ok()
    db_size: Optional[float] = None
    db_path = get_db().db_path
    if db_connected and os.path.exists(db_path):
        db_size = os.path.getsize(db_path) / (1024 * 1024)

    relay = getattr(request.app.state, "relay", None)
    health = HealthResponse(
        status="healthy" if db_connected else "degraded",
        database=db_connected,
        websocket_connections=get_ws_manager().connection_count,
        relay_pending=relay.pending if relay else 0,
        system={
            "uptime_seconds": int(time.time() - _start_time),
            "memory_mb": round(memory_mb, 2),
            "db_size_mb": round(db_size, 2) if db_size else None,
        },
    )

    logger.debug("Health Check (Detailed)", [
        ("Status", health.status),
        ("Memory", f"{round(memory_mb, 2)}MB"),
        ("WS Clients", str(health.websocket_connections)),
        ("Relay Pending", str(health.relay_pending)),
    ])

    return APIResponse(success=True, data=health)


@router.get("/ready")
async def readiness_check() -> APIResponse[dict]:
    """Readiness check for orchestrators."""
    is_ready = _database_ok()
    return APIResponse(
        success=is_ready,
        data={
            "ready": is_ready,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


__all__ = ["router"]
