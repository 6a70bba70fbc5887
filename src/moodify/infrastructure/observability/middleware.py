"""Request/response logging middleware."""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from moodify.infrastructure.observability.logging import (
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


# Hey future me, this runs around EVERY request. It adopts the caller's X-Correlation-ID (or mints
# one), so every log line of the request carries the same id, and echoes it back in the response.
# Request bodies are never logged - they can carry passwords (login/register, profile delete).
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of each request."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        set_correlation_id(request.headers.get(CORRELATION_HEADER))

        method = request.method
        path = request.url.path
        # health probes hit every few seconds, keep them out of INFO
        log_level = logging.DEBUG if path == "/api/health" else logging.INFO

        logger.log(
            log_level,
            "→ %s %s",
            method,
            path,
            extra={
                "method": method,
                "path": path,
                "client_ip": request.client.host if request.client else "unknown",
            },
        )

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed: %s %s",
                method,
                path,
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                    "error_type": type(e).__name__,
                },
            )
            raise

        duration_ms = int((time.perf_counter() - start) * 1000)
        marker = "✓" if response.status_code < 400 else "✗"
        logger.log(
            log_level,
            "%s %s %s → %s (%dms)",
            marker,
            method,
            path,
            response.status_code,
            duration_ms,
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers[CORRELATION_HEADER] = get_correlation_id()
        return response
