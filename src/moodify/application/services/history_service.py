"""User activity history and analytics.

History is the union of two tables: ``emotion_analyses`` (type "emotion")
and ``music_recommendations`` (type "recommendation"), newest first.

All day/hour bucketing is done in UTC so results don't depend on the
server's timezone.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from moodify.domain.entities import (
    EmotionAnalysis,
    HistoryEntry,
    RecommendationRecord,
    utc_now,
)
from moodify.domain.exceptions import EntityNotFoundException
from moodify.domain.value_objects import NEGATIVE_EMOTIONS, POSITIVE_EMOTIONS, Emotion
from moodify.infrastructure.persistence.repositories import (
    EmotionAnalysisRepository,
    RecommendationRepository,
    UserStatisticsRepository,
)

logger = logging.getLogger(__name__)

HISTORY_TYPES = ("emotion", "recommendation")
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
POPULAR_TRACKS_LIMIT = 10


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _empty_distribution() -> dict[str, int]:
    return {emotion.value: 0 for emotion in Emotion}


def _day_key(dt: datetime) -> str:
    return dt.date().isoformat()


def _js_weekday(dt: datetime) -> int:
    # Sunday = 0 ... Saturday = 6
    return (dt.weekday() + 1) % 7


def _analysis_entry(analysis: EmotionAnalysis) -> HistoryEntry:
    return HistoryEntry(
        id=analysis.id,
        type="emotion",
        created_at=analysis.created_at,
        data={
            "emotion": analysis.emotion.value,
            "confidence": analysis.confidence,
            "imageUrl": analysis.image_url,
            "metadata": analysis.metadata,
        },
    )


def _recommendation_entry(record: RecommendationRecord) -> HistoryEntry:
    return HistoryEntry(
        id=record.id,
        type="recommendation",
        created_at=record.created_at,
        data={
            "emotion": record.emotion.value,
            "trackId": record.track_id,
            "trackName": record.track_name,
            "artistName": record.artist_name,
            "albumName": record.album_name,
            "trackUrl": record.track_url,
            "imageUrl": record.image_url,
            "durationMs": record.duration_ms,
            "popularity": record.popularity,
            "audioFeatures": record.audio_features,
        },
    )


@dataclass
class HistoryPage:
    """One page of history entries."""

    entries: list[HistoryEntry]
    total: int
    page: int
    limit: int

    @property
    def has_more(self) -> bool:
        return (self.page - 1) * self.limit + self.limit < self.total

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass
class HistoryAnalytics:
    """Aggregated view over a time window, serialized with camelCase keys."""

    total_analyses: int
    total_recommendations: int
    average_analyses_per_day: float
    emotion_distribution: dict[str, int]
    most_common_emotion: str
    sentiment_analysis: dict[str, int]
    weekly_data: list[dict[str, Any]] = field(default_factory=list)
    daily_trends: list[dict[str, Any]] = field(default_factory=list)
    popular_tracks: list[dict[str, Any]] = field(default_factory=list)
    activity_patterns: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalAnalyses": self.total_analyses,
            "totalRecommendations": self.total_recommendations,
            "averageAnalysesPerDay": self.average_analyses_per_day,
            "emotionDistribution": self.emotion_distribution,
            "mostCommonEmotion": self.most_common_emotion,
            "sentimentAnalysis": self.sentiment_analysis,
            "weeklyData": self.weekly_data,
            "dailyTrends": self.daily_trends,
            "musicPreferences": {"popularTracks": self.popular_tracks},
            "activityPatterns": self.activity_patterns,
        }


def emotion_distribution(analyses: list[EmotionAnalysis]) -> dict[str, int]:
    """Count analyses per emotion, every emotion present (zero if unseen)."""
    distribution = _empty_distribution()
    for analysis in analyses:
        distribution[analysis.emotion.value] += 1
    return distribution


# Hey future me - "neutral" is the answer for an empty window, and ties go to whichever emotion
# comes first in the Emotion enum (strict > comparison). Keep that stable, the UI relies on it.
def most_common_emotion(distribution: dict[str, int]) -> str:
    """Emotion with the highest count, neutral when nothing was recorded."""
    best, best_count = Emotion.NEUTRAL.value, 0
    for emotion, count in distribution.items():
        if count > best_count:
            best, best_count = emotion, count
    return best


def sentiment_split(analyses: list[EmotionAnalysis]) -> dict[str, int]:
    """Positive/negative/neutral share of analyses in whole percent."""
    positive = sum(1 for a in analyses if a.emotion in POSITIVE_EMOTIONS)
    negative = sum(1 for a in analyses if a.emotion in NEGATIVE_EMOTIONS)
    neutral = len(analyses) - positive - negative
    total = len(analyses) or 1
    return {
        "positive": _round_half_up(positive / total * 100),
        "negative": _round_half_up(negative / total * 100),
        "neutral": _round_half_up(neutral / total * 100),
    }


def daily_buckets(analyses: list[EmotionAnalysis]) -> list[tuple[str, dict[str, int]]]:
    """Per-UTC-day emotion counts, oldest day first."""
    days: dict[str, dict[str, int]] = {}
    for analysis in analyses:
        bucket = days.setdefault(_day_key(analysis.created_at), _empty_distribution())
        bucket[analysis.emotion.value] += 1
    return sorted(days.items())


def popular_tracks(records: list[RecommendationRecord]) -> list[dict[str, Any]]:
    """Most often recommended tracks (by name and artist), top ten."""
    counts = Counter((r.track_name, r.artist_name) for r in records)
    return [
        {"name": name, "artist": artist, "playCount": count}
        for (name, artist), count in counts.most_common(POPULAR_TRACKS_LIMIT)
    ]


def activity_patterns(timestamps: list[datetime]) -> dict[str, Any]:
    """Hour-of-day and day-of-week histograms (UTC) with their peaks."""
    hourly = [0] * 24
    weekly = [0] * 7
    for ts in timestamps:
        hourly[ts.hour] += 1
        weekly[_js_weekday(ts)] += 1
    return {
        "hourlyDistribution": hourly,
        "dayOfWeekDistribution": weekly,
        "peakActivityHour": hourly.index(max(hourly)),
        "peakActivityDay": DAY_NAMES[weekly.index(max(weekly))],
    }


class HistoryService:
    """Read and prune a user's history, compute analytics over it."""

    def __init__(self, session: AsyncSession) -> None:
        self._analyses = EmotionAnalysisRepository(session)
        self._recommendations = RecommendationRepository(session)
        self._statistics = UserStatisticsRepository(session)

    async def list_history(
        self,
        user_id: str,
        entry_type: str | None = None,
        page: int = 1,
        limit: int = 20,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> HistoryPage:
        """Paginated history, newest first.

        Args:
            entry_type: "emotion", "recommendation", or None/"all" for both
        """
        entries: list[HistoryEntry] = []
        if entry_type in (None, "all", "emotion"):
            analyses = await self._analyses.list_for_user(user_id, start, end)
            entries.extend(_analysis_entry(a) for a in analyses)
        if entry_type in (None, "all", "recommendation"):
            records = await self._recommendations.list_for_user(user_id, start, end)
            entries.extend(_recommendation_entry(r) for r in records)

        entries.sort(key=lambda e: e.created_at, reverse=True)
        offset = (page - 1) * limit
        return HistoryPage(
            entries=entries[offset : offset + limit],
            total=len(entries),
            page=page,
            limit=limit,
        )

    async def delete_entry(self, user_id: str, entry_id: str) -> None:
        """Delete one of the user's history entries, whichever table holds it.

        Raises:
            EntityNotFoundException: No such entry, or it belongs to someone else
        """
        if await self._analyses.delete_for_user(entry_id, user_id):
            return
        if await self._recommendations.delete_for_user(entry_id, user_id):
            return
        raise EntityNotFoundException("History entry", entry_id)

    async def analytics(
        self, user_id: str, time_range_days: int = 30, now: datetime | None = None
    ) -> HistoryAnalytics:
        """Analytics over the last ``time_range_days`` UTC days, today included."""
        now = now or utc_now()
        today = now.date()
        start = datetime.combine(
            today - timedelta(days=time_range_days - 1), time.min, tzinfo=now.tzinfo
        )
        end = datetime.combine(today, time.max, tzinfo=now.tzinfo)

        analyses = await self._analyses.list_for_user(user_id, start, end)
        records = await self._recommendations.list_for_user(user_id, start, end)
        stats = await self._statistics.get(user_id)

        distribution = emotion_distribution(analyses)
        buckets = daily_buckets(analyses)

        return HistoryAnalytics(
            # lifetime counters win, window counts only when nothing was aggregated yet
            total_analyses=(stats.total_analyses if stats else 0) or len(analyses),
            total_recommendations=(stats.total_recommendations if stats else 0) or len(records),
            average_analyses_per_day=round(len(analyses) / time_range_days, 2),
            emotion_distribution=distribution,
            most_common_emotion=most_common_emotion(distribution),
            sentiment_analysis=sentiment_split(analyses),
            weekly_data=[
                {"week": day, "count": sum(counts.values()), "emotions": counts}
                for day, counts in buckets
            ],
            daily_trends=[
                {
                    "date": day,
                    "count": sum(counts.values()),
                    "primaryEmotion": most_common_emotion(counts),
                }
                for day, counts in buckets
            ],
            popular_tracks=popular_tracks(records),
            activity_patterns=activity_patterns(
                [a.created_at for a in analyses] + [r.created_at for r in records]
            ),
        )
