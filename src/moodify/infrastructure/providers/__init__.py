"""Recommendation provider adapters."""

from moodify.infrastructure.providers.spotify_provider import (
    SpotifyRecommendationProvider,
    format_track,
)

__all__ = ["SpotifyRecommendationProvider", "format_track"]
