"""Public health check for load balancers and monitoring."""

import logging
import time
from datetime import UTC, datetime
from typing import Any

import psutil
from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from moodify.api.dependencies import get_app_settings
from moodify.api.envelopes import cors_headers, isoformat, preflight_response
from moodify.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

HEALTH_METHODS = "GET, OPTIONS"
BYTES_PER_MB = 1024 * 1024


def _to_mb(value: int) -> int:
    return round(value / BYTES_PER_MB)


# Hey future me - Python has no V8 heap, so the memory block maps onto psutil's view of the process:
#   rss       → resident set size
#   heapTotal → virtual memory size (everything reserved)
#   heapUsed  → resident set size again (what is actually in use)
# All in MB, rounded. Uptime is seconds since the PROCESS started, not since app startup.
def collect_health(settings: Settings, process: psutil.Process | None = None) -> dict[str, Any]:
    """Build the healthy payload. Raises if the process can't be inspected."""
    process = process or psutil.Process()
    memory = process.memory_info()
    return {
        "status": "healthy",
        "timestamp": isoformat(datetime.now(UTC)),
        "uptime": round(time.time() - process.create_time(), 3),
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": {
            "server": "ok",
            "memory": {
                "rss": _to_mb(memory.rss),
                "heapTotal": _to_mb(memory.vms),
                "heapUsed": _to_mb(memory.rss),
            },
        },
    }


@router.get("/health")
async def health_check(settings: Settings = Depends(get_app_settings)) -> JSONResponse:
    """Report process health. No authentication, never cached."""
    try:
        payload = collect_health(settings)
    except Exception as e:
        logger.error("Health check failed", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "timestamp": isoformat(datetime.now(UTC)),
                "error": str(e) or type(e).__name__,
            },
            headers=cors_headers(HEALTH_METHODS),
        )

    headers = cors_headers(HEALTH_METHODS)
    headers["Cache-Control"] = "no-store, max-age=0"
    return JSONResponse(status_code=status.HTTP_200_OK, content=payload, headers=headers)


@router.options("/health")
async def health_preflight() -> Response:
    """CORS preflight."""
    return preflight_response(HEALTH_METHODS)
