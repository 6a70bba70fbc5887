"""Emotion-based music recommendations."""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from moodify.api.dependencies import (
    get_identity,
    get_recommendation_service,
    read_json_body,
)
from moodify.api.envelopes import preflight_response, recommendation_payload, success
from moodify.application.services.recommendation_service import RecommendationService
from moodify.application.validation import validate_recommendation_request
from moodify.domain.entities import Identity
from moodify.domain.exceptions import DomainException, ProviderError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recommendations"])


# Hey future me - order matters here: identity is a Depends, so 401 is decided BEFORE we even
# read the body. Then validation (400), then the orchestrator (500 on provider failure).
# Anything else blowing up unexpectedly is reported as the same 500 the provider gets.
@router.post("/music/recommendations")
async def create_recommendations(
    request: Request,
    identity: Identity = Depends(get_identity),
    service: RecommendationService = Depends(get_recommendation_service),
) -> JSONResponse:
    """Recommend tracks for the caller's current emotion."""
    payload = await read_json_body(request)
    data = validate_recommendation_request(payload)

    try:
        result = await service.recommend(
            user_id=identity.user_id,
            emotion=data.emotion,
            limit=data.limit,
            confidence=data.confidence,
        )
    except DomainException:
        raise
    except Exception as e:
        logger.exception("Unexpected error while generating recommendations")
        raise ProviderError() from e

    return success(recommendation_payload(result))


@router.options("/music/recommendations")
async def recommendations_preflight() -> Response:
    """CORS preflight."""
    return preflight_response()
