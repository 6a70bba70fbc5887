"""Recommendation orchestration: provider call, best-effort archive, result."""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from moodify.domain.entities import RecommendationRecord, Track, utc_now
from moodify.domain.exceptions import ProviderError
from moodify.domain.ports import IRecommendationHistoryStore, IRecommendationProvider
from moodify.domain.value_objects import Emotion

logger = logging.getLogger(__name__)

DEFAULT_POPULARITY = 50


@dataclass
class RecommendationResult:
    """What the caller gets back: the full tracklist plus request echo."""

    emotion: Emotion
    confidence: float | None
    tracks: list[Track]
    generated_at: datetime = field(default_factory=utc_now)

    @property
    def total_tracks(self) -> int:
        return len(self.tracks)


def build_record(
    user_id: str,
    emotion: Emotion,
    confidence: float | None,
    tracks: list[Track],
) -> RecommendationRecord:
    """Snapshot the first track of a result, with fixed placeholders for an empty list."""
    first = tracks[0] if tracks else None
    return RecommendationRecord(
        user_id=user_id,
        emotion=emotion,
        track_id=first.id if first else "fallback",
        track_name=first.name if first else "Fallback Track",
        artist_name=first.artist if first else "Unknown Artist",
        album_name=first.album if first else "Unknown Album",
        track_url=first.spotify_url if first else "",
        image_url=(first.image_url or "") if first else "",
        duration_ms=first.duration * 1000 if first else 0,
        popularity=(
            first.popularity if first and first.popularity is not None else DEFAULT_POPULARITY
        ),
        audio_features={
            "emotion": emotion.value,
            "confidence": confidence,
            "tracksCount": len(tracks),
        },
    )


# Hey future me - the two failure branches here are DIFFERENT on purpose:
#   1. provider fails  → hard fail, ProviderError, caller gets 500 and NO tracks
#   2. history fails   → soft fail, logged and swallowed, caller still gets their tracks
# Don't merge them into one try/except! And don't retry the provider - one call per request.
class RecommendationService:
    """Turn an emotion into tracks and archive the outcome."""

    def __init__(
        self,
        provider: IRecommendationProvider,
        history_store: IRecommendationHistoryStore,
    ) -> None:
        self._provider = provider
        self._history_store = history_store

    async def recommend(
        self,
        user_id: str,
        emotion: Emotion,
        limit: int = 20,
        confidence: float | None = None,
    ) -> RecommendationResult:
        """Get recommendations for ``emotion`` on behalf of ``user_id``.

        Raises:
            ProviderError: The provider failed, nothing was archived
        """
        try:
            tracks = await self._provider.get_recommendations_by_emotion(emotion, limit)
        except Exception as e:
            logger.error(
                "Recommendation provider failed for %s",
                emotion.value,
                exc_info=True,
                extra={"user_id": user_id, "emotion": emotion.value},
            )
            raise ProviderError() from e

        record = build_record(user_id, emotion, confidence, tracks)
        try:
            await self._history_store.record(record)
        except Exception:
            logger.warning(
                "Could not archive recommendation for user %s",
                user_id,
                exc_info=True,
                extra={"user_id": user_id, "emotion": emotion.value},
            )

        logger.info(
            "Generated %d recommendations for %s",
            len(tracks),
            emotion.value,
            extra={"user_id": user_id, "emotion": emotion.value},
        )
        return RecommendationResult(emotion=emotion, confidence=confidence, tracks=tracks)
