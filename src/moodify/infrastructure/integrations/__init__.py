"""External service integrations."""

from moodify.infrastructure.integrations.spotify_client import SpotifyClient

__all__ = ["SpotifyClient"]
