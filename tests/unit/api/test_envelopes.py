"""Tests for response envelopes and CORS helpers."""

import json
from datetime import UTC, datetime

from moodify.api.envelopes import (
    cors_headers,
    isoformat,
    preflight_response,
    recommendation_payload,
    success,
)
from moodify.application.services.recommendation_service import RecommendationResult
from moodify.domain.entities import Track
from moodify.domain.value_objects import Emotion

GENERATED_AT = datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=UTC)


def _result(confidence: float | None) -> RecommendationResult:
    track = Track(
        id="t1",
        name="Song",
        artist="Band",
        album="Record",
        duration=215,
        spotify_url="https://open.spotify.com/track/t1",
        preview_url=None,
        image_url="https://i.scdn.co/image/t1",
        popularity=40,
    )
    return RecommendationResult(
        emotion=Emotion.HAPPY, confidence=confidence, tracks=[track], generated_at=GENERATED_AT
    )


def test_isoformat_uses_milliseconds_and_z() -> None:
    assert isoformat(GENERATED_AT) == "2024-01-02T03:04:05.678Z"


def test_success_envelope() -> None:
    response = success({"a": 1}, status_code=201)
    assert response.status_code == 201
    assert json.loads(response.body) == {"success": True, "data": {"a": 1}}


def test_preflight_is_empty_200_with_cors_headers() -> None:
    response = preflight_response("GET, OPTIONS")

    assert response.status_code == 200
    assert response.body == b""
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET, OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type, Authorization"
    assert response.headers["Access-Control-Max-Age"] == "86400"


def test_default_cors_methods() -> None:
    assert cors_headers()["Access-Control-Allow-Methods"] == "GET, POST, PUT, DELETE, OPTIONS"


def test_recommendation_payload_shape() -> None:
    data = recommendation_payload(_result(0.87))

    assert list(data) == ["emotion", "confidence", "tracks", "generatedAt", "totalTracks"]
    assert data["emotion"] == "happy"
    assert data["confidence"] == 0.87
    assert data["generatedAt"] == "2024-01-02T03:04:05.678Z"
    assert data["totalTracks"] == 1
    assert data["tracks"] == [
        {
            "id": "t1",
            "name": "Song",
            "artist": "Band",
            "album": "Record",
            "duration": 215,
            "previewUrl": None,
            "imageUrl": "https://i.scdn.co/image/t1",
            "spotifyUrl": "https://open.spotify.com/track/t1",
            "popularity": 40,
        }
    ]


def test_confidence_is_omitted_when_absent() -> None:
    assert "confidence" not in recommendation_payload(_result(None))
