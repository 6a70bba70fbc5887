"""Recording emotion analyses."""

import logging
from typing import Any

from moodify.domain.entities import EmotionAnalysis
from moodify.domain.value_objects import Emotion
from moodify.infrastructure.persistence.database import Database
from moodify.infrastructure.persistence.repositories import (
    EmotionAnalysisRepository,
    UserStatisticsRepository,
)

logger = logging.getLogger(__name__)


# Yo, mirror image of the recommendation flow: here the analysis row IS the result, so writing it
# hard-fails. Only the counter bump is best-effort, in a second unit of work so a failing upsert
# can't roll back an analysis that was already stored.
class EmotionService:
    """Store classification results and keep total_analyses current."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def record_analysis(
        self,
        user_id: str,
        emotion: Emotion,
        confidence: float,
        image_url: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> EmotionAnalysis:
        """Persist one analysis for ``user_id``."""
        analysis = EmotionAnalysis(
            user_id=user_id,
            emotion=emotion,
            confidence=confidence,
            image_url=image_url,
            metadata=metadata,
        )
        async with self._db.session_scope() as session:
            await EmotionAnalysisRepository(session).add(analysis)

        try:
            async with self._db.session_scope() as session:
                await UserStatisticsRepository(session).increment_analyses(user_id)
        except Exception:
            logger.warning(
                "Could not update analysis statistics for user %s",
                user_id,
                exc_info=True,
                extra={"user_id": user_id},
            )

        logger.info(
            "Recorded %s analysis (%.2f)",
            emotion.value,
            confidence,
            extra={"user_id": user_id, "emotion": emotion.value},
        )
        return analysis
