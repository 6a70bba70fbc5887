"""Activity history and analytics."""

from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from moodify.api.dependencies import get_history_service, get_identity
from moodify.api.envelopes import preflight_response, success
from moodify.api.schemas.responses import HistoryEntrySchema
from moodify.application.services.history_service import HistoryService
from moodify.domain.entities import Identity

router = APIRouter(prefix="/history", tags=["history"])


def _as_utc(value: datetime | None) -> datetime | None:
    # naive query dates are taken as UTC, aware ones converted
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@router.get("")
async def list_history(
    entry_type: Literal["emotion", "recommendation", "all"] = Query("all", alias="type"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    identity: Identity = Depends(get_identity),
    service: HistoryService = Depends(get_history_service),
) -> JSONResponse:
    """Paginated history, newest first."""
    result = await service.list_history(
        identity.user_id,
        entry_type=entry_type,
        page=page,
        limit=limit,
        start=_as_utc(start_date),
        end=_as_utc(end_date),
    )
    return success(
        {
            "history": [HistoryEntrySchema.from_entity(e).to_json() for e in result.entries],
            "pagination": {
                "total": result.total,
                "page": result.page,
                "limit": result.limit,
                "hasMore": result.has_more,
                "totalPages": result.total_pages,
            },
        }
    )


@router.get("/analytics")
async def history_analytics(
    time_range: int = Query(30, alias="timeRange", ge=1, le=365, description="Window in days"),
    identity: Identity = Depends(get_identity),
    service: HistoryService = Depends(get_history_service),
) -> JSONResponse:
    """Aggregated analytics over the last ``timeRange`` days."""
    analytics = await service.analytics(identity.user_id, time_range)
    return success(analytics.to_dict())


@router.delete("/{entry_id}")
async def delete_history_entry(
    entry_id: str,
    identity: Identity = Depends(get_identity),
    service: HistoryService = Depends(get_history_service),
) -> JSONResponse:
    """Delete one of the caller's history entries."""
    await service.delete_entry(identity.user_id, entry_id)
    return JSONResponse(content={"success": True, "message": "History entry deleted"})


@router.options("")
@router.options("/analytics")
@router.options("/{entry_id}")
async def history_preflight() -> Response:
    """CORS preflight."""
    return preflight_response()
