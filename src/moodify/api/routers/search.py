"""Track search and track details."""

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from moodify.api.dependencies import get_identity, get_recommendation_provider
from moodify.api.envelopes import isoformat, preflight_response, success
from moodify.api.schemas.responses import TrackSchema
from moodify.domain.entities import Identity, utc_now
from moodify.domain.exceptions import EntityNotFoundException
from moodify.domain.ports import IRecommendationProvider

router = APIRouter(tags=["music"])


@router.get("/music/search")
async def search_tracks(
    q: str = Query(..., min_length=1, max_length=100, description="Free-text query"),
    limit: int = Query(20, ge=1, le=50),
    _identity: Identity = Depends(get_identity),
    provider: IRecommendationProvider = Depends(get_recommendation_provider),
) -> JSONResponse:
    """Search the provider's catalogue."""
    tracks = await provider.search_tracks(q, limit)
    return success(
        {
            "query": q,
            "tracks": [TrackSchema.from_entity(t).to_json() for t in tracks],
            "totalTracks": len(tracks),
            "searchedAt": isoformat(utc_now()),
        }
    )


@router.get("/music/tracks/{track_id}")
async def get_track(
    track_id: str,
    _identity: Identity = Depends(get_identity),
    provider: IRecommendationProvider = Depends(get_recommendation_provider),
) -> JSONResponse:
    """Details of a single track."""
    track = await provider.get_track(track_id)
    if track is None:
        raise EntityNotFoundException("Track", track_id)
    return success(TrackSchema.from_entity(track).to_json())


@router.options("/music/search")
@router.options("/music/tracks/{track_id}")
async def music_preflight() -> Response:
    """CORS preflight."""
    return preflight_response()
