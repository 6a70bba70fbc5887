"""Recording emotion analyses from the client-side classifier."""

from fastapi import APIRouter, Depends, Request, Response, status

from moodify.api.dependencies import get_emotion_service, get_identity, read_json_body
from moodify.api.envelopes import isoformat, preflight_response, success
from moodify.application.services.emotion_service import EmotionService
from moodify.application.validation import EmotionAnalysisRequest, validate_payload
from moodify.domain.entities import Identity

router = APIRouter(tags=["emotions"])


@router.post("/emotions")
async def record_emotion(
    request: Request,
    identity: Identity = Depends(get_identity),
    service: EmotionService = Depends(get_emotion_service),
) -> Response:
    """Store one classification result for the caller."""
    data = validate_payload(EmotionAnalysisRequest, await read_json_body(request))
    analysis = await service.record_analysis(
        user_id=identity.user_id,
        emotion=data.emotion,
        confidence=data.confidence,
        image_url=data.image_url,
        metadata=data.metadata,
    )
    return success(
        {
            "id": analysis.id,
            "emotion": analysis.emotion.value,
            "confidence": analysis.confidence,
            "imageUrl": analysis.image_url,
            "metadata": analysis.metadata,
            "createdAt": isoformat(analysis.created_at),
        },
        status_code=status.HTTP_201_CREATED,
    )


@router.options("/emotions")
async def emotions_preflight() -> Response:
    """CORS preflight."""
    return preflight_response()
