"""Spotify recommendation provider.

Implements IRecommendationProvider on top of SpotifyClient. It translates an
emotion into Spotify seed genres plus target audio features and converts
Spotify track objects into domain Tracks:

- artists → names joined with ", "
- duration_ms → seconds (rounded)
- album.images[0].url → image_url
- external_urls.spotify → spotify_url
"""

import logging
from typing import Any

from moodify.config.settings import SpotifySettings
from moodify.domain.entities import Track
from moodify.domain.ports import IRecommendationProvider
from moodify.domain.value_objects import Emotion, audio_features_for, genres_for
from moodify.infrastructure.integrations.spotify_client import SpotifyClient

logger = logging.getLogger(__name__)


# Hey future me - this catalogue is ONLY served when SPOTIFY__FALLBACK_ON_ERROR=true. By default a
# Spotify failure propagates and the caller answers 500, because silently handing out the same
# two songs looks like a working API when it isn't.
FALLBACK_TRACKS: dict[Emotion, tuple[Track, ...]] = {
    Emotion.HAPPY: (
        Track("fallback-happy-1", "Happy", "Pharrell Williams", "G I R L", 232, "#", popularity=85),
        Track(
            "fallback-happy-2",
            "Can't Stop the Feeling!",
            "Justin Timberlake",
            "Trolls (Original Motion Picture Soundtrack)",
            236,
            "#",
            popularity=80,
        ),
    ),
    Emotion.SAD: (
        Track("fallback-sad-1", "Someone Like You", "Adele", "21", 285, "#", popularity=85),
    ),
    Emotion.ANGRY: (
        Track(
            "fallback-angry-1", "Break Stuff", "Limp Bizkit", "Significant Other", 167, "#",
            popularity=70,
        ),
    ),
    Emotion.SURPRISED: (
        Track(
            "fallback-surprised-1", "Bohemian Rhapsody", "Queen", "A Night at the Opera", 355, "#",
            popularity=90,
        ),
    ),
    Emotion.NEUTRAL: (
        Track(
            "fallback-neutral-1", "Weightless", "Marconi Union", "Weightless", 485, "#",
            popularity=60,
        ),
    ),
    Emotion.FEAR: (
        Track(
            "fallback-fear-1", "Breathe Me", "Sia", "Colour the Small One", 269, "#",
            popularity=75,
        ),
    ),
    Emotion.DISGUST: (
        Track(
            "fallback-disgust-1", "Smells Like Teen Spirit", "Nirvana", "Nevermind", 301, "#",
            popularity=85,
        ),
    ),
}


def format_track(raw: dict[str, Any]) -> Track:
    """Convert a Spotify track object into a domain Track."""
    album = raw.get("album") or {}
    images = album.get("images") or []
    return Track(
        id=raw["id"],
        name=raw.get("name", ""),
        artist=", ".join(a.get("name", "") for a in raw.get("artists") or []),
        album=album.get("name", ""),
        duration=round((raw.get("duration_ms") or 0) / 1000),
        spotify_url=(raw.get("external_urls") or {}).get("spotify", ""),
        preview_url=raw.get("preview_url") or None,
        image_url=images[0].get("url") if images else None,
        popularity=raw.get("popularity"),
    )


class SpotifyRecommendationProvider(IRecommendationProvider):
    """Recommendation provider backed by the Spotify Web API."""

    def __init__(self, client: SpotifyClient, settings: SpotifySettings) -> None:
        self._client = client
        self._fallback_on_error = settings.fallback_on_error

    @classmethod
    def from_settings(cls, settings: SpotifySettings) -> "SpotifyRecommendationProvider":
        """Build the provider with its own SpotifyClient."""
        return cls(SpotifyClient(settings), settings)

    async def get_recommendations_by_emotion(
        self, emotion: Emotion, limit: int = 20
    ) -> list[Track]:
        features = audio_features_for(emotion)
        try:
            raw_tracks = await self._client.get_recommendations(
                seed_genres=list(genres_for(emotion)),
                limit=limit,
                target_valence=features.valence,
                target_energy=features.energy,
                target_danceability=features.danceability,
            )
        except Exception:
            if not self._fallback_on_error:
                raise
            logger.warning(
                "Spotify recommendations failed, serving fallback catalogue",
                exc_info=True,
                extra={"emotion": emotion.value},
            )
            return self.fallback_tracks(emotion, limit)

        return [format_track(t) for t in raw_tracks]

    async def search_tracks(self, query: str, limit: int = 20) -> list[Track]:
        raw_tracks = await self._client.search_tracks(query, limit)
        return [format_track(t) for t in raw_tracks]

    async def get_track(self, track_id: str) -> Track | None:
        raw = await self._client.get_track(track_id)
        return format_track(raw) if raw else None

    async def close(self) -> None:
        await self._client.close()

    @staticmethod
    def fallback_tracks(emotion: Emotion, limit: int) -> list[Track]:
        """Built-in tracks for an emotion, at most ``limit`` of them."""
        tracks = FALLBACK_TRACKS.get(emotion, FALLBACK_TRACKS[Emotion.NEUTRAL])
        return list(tracks[:limit])
