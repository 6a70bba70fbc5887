"""Response envelopes shared by all routes.

Success bodies look like ``{"success": true, "data": {...}}``. Failure bodies
look like ``{"message": "..."}`` (plus ``errors`` for validation failures) and
are built by the exception handlers from ``error_body``.
"""

from datetime import datetime
from typing import Any

from fastapi import Response, status
from fastapi.responses import JSONResponse

from moodify.api.schemas.responses import TrackSchema
from moodify.application.services.recommendation_service import RecommendationResult

# Hey future me - CORS is answered by hand on purpose (explicit OPTIONS routes + these headers)
# rather than CORSMiddleware: clients expect a plain 200 with exactly these values, including
# the wildcard origin, and the health endpoint advertises a narrower method list.
CORS_ALLOW_ORIGIN = "*"
CORS_ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization"
CORS_MAX_AGE = "86400"


def cors_headers(methods: str = CORS_ALLOW_METHODS) -> dict[str, str]:
    """CORS headers sent on preflight and on public responses."""
    return {
        "Access-Control-Allow-Origin": CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Methods": methods,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    }


def preflight_response(methods: str = CORS_ALLOW_METHODS) -> Response:
    """Empty 200 answer to an OPTIONS preflight."""
    headers = cors_headers(methods)
    headers["Access-Control-Max-Age"] = CORS_MAX_AGE
    return Response(status_code=status.HTTP_200_OK, headers=headers)


def success(data: Any, status_code: int = status.HTTP_200_OK, **extra: Any) -> JSONResponse:
    """Wrap ``data`` in the success envelope."""
    body: dict[str, Any] = {"success": True, "data": data}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def error_body(message: str, errors: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    """Failure body, ``errors`` only when there are field errors to report."""
    body: dict[str, Any] = {"message": message}
    if errors is not None:
        body["errors"] = errors
    return body


def isoformat(dt: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def recommendation_payload(result: RecommendationResult) -> dict[str, Any]:
    """``data`` part of a successful recommendation response.

    ``confidence`` is left out entirely when the request didn't carry one.
    """
    data: dict[str, Any] = {"emotion": result.emotion.value}
    if result.confidence is not None:
        data["confidence"] = result.confidence
    data["tracks"] = [TrackSchema.from_entity(t).to_json() for t in result.tracks]
    data["generatedAt"] = isoformat(result.generated_at)
    data["totalTracks"] = result.total_tracks
    return data
