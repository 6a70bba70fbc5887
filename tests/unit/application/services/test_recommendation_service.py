"""Tests for the recommendation orchestrator.

Hey future me - the two failure modes are asserted separately on purpose: a provider failure must
archive NOTHING, while an archive failure must still hand the tracks to the caller.
"""

from unittest.mock import AsyncMock

import pytest

from moodify.application.services.recommendation_service import (
    DEFAULT_POPULARITY,
    RecommendationService,
    build_record,
)
from moodify.domain.entities import Track
from moodify.domain.exceptions import PersistenceError, ProviderError
from moodify.domain.ports import IRecommendationHistoryStore, IRecommendationProvider
from moodify.domain.value_objects import Emotion


def _track(track_id: str = "t1", popularity: int | None = 77) -> Track:
    return Track(
        id=track_id,
        name="Song",
        artist="Band",
        album="Record",
        duration=215,
        spotify_url="https://open.spotify.com/track/t1",
        image_url="https://i.scdn.co/image/t1",
        popularity=popularity,
    )


@pytest.fixture
def provider() -> AsyncMock:
    mock = AsyncMock(spec=IRecommendationProvider)
    mock.get_recommendations_by_emotion.return_value = [_track("t1"), _track("t2")]
    return mock


@pytest.fixture
def history_store() -> AsyncMock:
    return AsyncMock(spec=IRecommendationHistoryStore)


@pytest.fixture
def service(provider: AsyncMock, history_store: AsyncMock) -> RecommendationService:
    return RecommendationService(provider, history_store)


class TestRecommend:
    """Orchestration of provider call and archive write."""

    async def test_success_returns_tracks_and_archives_once(
        self, service: RecommendationService, provider: AsyncMock, history_store: AsyncMock
    ) -> None:
        result = await service.recommend("user-1", Emotion.HAPPY, limit=2, confidence=0.9)

        provider.get_recommendations_by_emotion.assert_awaited_once_with(Emotion.HAPPY, 2)
        history_store.record.assert_awaited_once()
        record = history_store.record.await_args.args[0]
        assert record.user_id == "user-1"
        assert record.emotion is Emotion.HAPPY
        assert record.track_id == "t1"

        assert result.emotion is Emotion.HAPPY
        assert result.confidence == 0.9
        assert [t.id for t in result.tracks] == ["t1", "t2"]
        assert result.total_tracks == 2

    async def test_provider_failure_raises_and_archives_nothing(
        self, service: RecommendationService, provider: AsyncMock, history_store: AsyncMock
    ) -> None:
        provider.get_recommendations_by_emotion.side_effect = RuntimeError("spotify down")

        with pytest.raises(ProviderError) as exc_info:
            await service.recommend("user-1", Emotion.SAD)

        assert exc_info.value.message == "Failed to generate recommendations"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        history_store.record.assert_not_awaited()

    async def test_archive_failure_is_swallowed(
        self, service: RecommendationService, history_store: AsyncMock
    ) -> None:
        history_store.record.side_effect = PersistenceError("disk full")

        result = await service.recommend("user-1", Emotion.ANGRY)

        assert result.total_tracks == 2
        history_store.record.assert_awaited_once()

    async def test_empty_result_still_archives_placeholder(
        self, service: RecommendationService, provider: AsyncMock, history_store: AsyncMock
    ) -> None:
        provider.get_recommendations_by_emotion.return_value = []

        result = await service.recommend("user-1", Emotion.NEUTRAL)

        assert result.tracks == []
        record = history_store.record.await_args.args[0]
        assert record.track_id == "fallback"
        assert record.track_name == "Fallback Track"


class TestBuildRecord:
    """Snapshot of the first track."""

    def test_snapshot_of_first_track(self) -> None:
        record = build_record("u", Emotion.FEAR, 0.4, [_track("first"), _track("second")])

        assert record.track_id == "first"
        assert record.track_name == "Song"
        assert record.artist_name == "Band"
        assert record.album_name == "Record"
        assert record.duration_ms == 215_000
        assert record.popularity == 77
        assert record.audio_features == {"emotion": "fear", "confidence": 0.4, "tracksCount": 2}

    def test_missing_popularity_defaults(self) -> None:
        record = build_record("u", Emotion.HAPPY, None, [_track(popularity=None)])
        assert record.popularity == DEFAULT_POPULARITY

    def test_placeholder_for_empty_tracklist(self) -> None:
        record = build_record("u", Emotion.DISGUST, None, [])

        assert record.track_id == "fallback"
        assert record.track_name == "Fallback Track"
        assert record.artist_name == "Unknown Artist"
        assert record.album_name == "Unknown Album"
        assert record.track_url == ""
        assert record.image_url == ""
        assert record.duration_ms == 0
        assert record.popularity == DEFAULT_POPULARITY
        assert record.audio_features == {
            "emotion": "disgust",
            "confidence": None,
            "tracksCount": 0,
        }
