"""Spotify Web API client using the client credentials flow."""

import logging
import time
from typing import Any

import httpx

from moodify.config.settings import SpotifySettings
from moodify.domain.exceptions import ConfigurationError, ExternalServiceError

logger = logging.getLogger(__name__)

# Refresh the app token this many seconds before Spotify says it expires
TOKEN_EXPIRY_MARGIN = 60


class SpotifyClient:
    """Thin async HTTP client for the Spotify endpoints Moodify needs.

    Returns raw Spotify JSON. Mapping to domain tracks is the provider's job.
    """

    TOKEN_URL = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint URL
    API_BASE_URL = "https://api.spotify.com/v1"

    # Hey future me, we DON'T build the httpx.AsyncClient here - it's created lazily in
    # _get_client() inside a running event loop. One client per process, closed in the
    # app lifespan shutdown via close().
    def __init__(self, settings: SpotifySettings) -> None:
        self.settings = settings
        self._client: httpx.AsyncClient | None = None
        self._access_token: str | None = None
        self._token_expires_at: float = 0.0

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # Listen up, this is an APP token (client credentials), not a user token - there's no
    # refresh token, we just ask again when it's about to run out. Cached in-process until
    # expires_in minus TOKEN_EXPIRY_MARGIN.
    async def _get_access_token(self) -> str:
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        if not self.settings.is_configured:
            raise ConfigurationError(
                "Spotify credentials not configured. "
                "Set SPOTIFY__CLIENT_ID and SPOTIFY__CLIENT_SECRET."
            )

        client = await self._get_client()
        try:
            response = await client.post(
                self.TOKEN_URL,
                data={"grant_type": "client_credentials"},
                auth=(self.settings.client_id, self.settings.client_secret),
            )
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Spotify token request failed: {e}") from e

        if response.status_code != 200:
            raise ExternalServiceError(
                "Failed to get Spotify access token", http_status=response.status_code
            )

        payload = response.json()
        self._access_token = payload["access_token"]
        expires_in = int(payload.get("expires_in", 3600))
        self._token_expires_at = time.monotonic() + expires_in - TOKEN_EXPIRY_MARGIN
        logger.debug("Fetched Spotify app token (expires in %ss)", expires_in)
        return self._access_token

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        token = await self._get_access_token()
        client = await self._get_client()
        try:
            return await client.get(
                f"{self.API_BASE_URL}{path}",
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Spotify request to {path} failed: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, what: str) -> None:
        if response.status_code >= 400:
            raise ExternalServiceError(
                f"Spotify {what} error: {response.status_code}",
                http_status=response.status_code,
            )

    async def get_recommendations(
        self,
        seed_genres: list[str],
        limit: int = 20,
        target_valence: float | None = None,
        target_energy: float | None = None,
        target_danceability: float | None = None,
    ) -> list[dict[str, Any]]:
        """Get recommended tracks for seed genres and audio feature targets.

        Args:
            seed_genres: Genre seeds, Spotify accepts at most five
            limit: Number of tracks (1-100)
            target_valence: Musical positiveness 0.0-1.0
            target_energy: Intensity 0.0-1.0
            target_danceability: Danceability 0.0-1.0

        Returns:
            List of Spotify track objects
        """
        params: dict[str, Any] = {
            "seed_genres": ",".join(seed_genres[:5]),
            "limit": limit,
            "market": self.settings.market,
        }
        if target_valence is not None:
            params["target_valence"] = target_valence
        if target_energy is not None:
            params["target_energy"] = target_energy
        if target_danceability is not None:
            params["target_danceability"] = target_danceability

        response = await self._get("/recommendations", params)
        self._raise_for_status(response, "recommendations")
        return list(response.json().get("tracks", []))

    async def search_tracks(self, query: str, limit: int = 20) -> list[dict[str, Any]]:
        """Search tracks by free text, returns Spotify track objects."""
        response = await self._get(
            "/search",
            {"q": query, "type": "track", "limit": limit, "market": self.settings.market},
        )
        self._raise_for_status(response, "search")
        return list(response.json().get("tracks", {}).get("items", []))

    # Yo, 404 is NOT an error here - an unknown id just means "no such track" and the
    # route turns None into its own 404. Anything else >= 400 is.
    async def get_track(self, track_id: str) -> dict[str, Any] | None:
        """Get one Spotify track object, None if Spotify doesn't know the id."""
        response = await self._get(f"/tracks/{track_id}", {"market": self.settings.market})
        if response.status_code in (400, 404):
            return None
        self._raise_for_status(response, "track")
        result: dict[str, Any] = response.json()
        return result

    async def __aenter__(self) -> "SpotifyClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
