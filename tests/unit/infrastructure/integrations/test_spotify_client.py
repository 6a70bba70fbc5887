"""Tests for the Spotify Web API client."""

import re

import httpx
import pytest
from pytest_httpx import HTTPXMock

from moodify.config import SpotifySettings
from moodify.domain.exceptions import ConfigurationError, ExternalServiceError
from moodify.infrastructure.integrations.spotify_client import SpotifyClient

RECOMMENDATIONS_URL = re.compile(r"https://api\.spotify\.com/v1/recommendations\?.*")
SEARCH_URL = re.compile(r"https://api\.spotify\.com/v1/search\?.*")


@pytest.fixture
def spotify_settings() -> SpotifySettings:
    return SpotifySettings(client_id="client", client_secret="secret", market="DE")


def _token(httpx_mock: HTTPXMock, expires_in: int = 3600) -> None:
    httpx_mock.add_response(
        method="POST",
        url=SpotifyClient.TOKEN_URL,
        json={"access_token": "app-token", "token_type": "Bearer", "expires_in": expires_in},
    )


class TestAccessToken:
    """Client credentials flow."""

    async def test_missing_credentials_is_a_configuration_error(self) -> None:
        async with SpotifyClient(SpotifySettings()) as client:
            with pytest.raises(ConfigurationError):
                await client.get_recommendations(["pop"])

    async def test_token_request_failure(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(method="POST", url=SpotifyClient.TOKEN_URL, status_code=401)

        async with SpotifyClient(spotify_settings) as client:
            with pytest.raises(ExternalServiceError) as exc_info:
                await client.get_recommendations(["pop"])
        assert exc_info.value.message == "Failed to get Spotify access token"
        assert exc_info.value.http_status == 401

    async def test_token_is_cached_between_calls(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock
    ) -> None:
        _token(httpx_mock)
        httpx_mock.add_response(method="GET", url=SEARCH_URL, json={"tracks": {"items": []}})
        httpx_mock.add_response(method="GET", url=SEARCH_URL, json={"tracks": {"items": []}})

        async with SpotifyClient(spotify_settings) as client:
            await client.search_tracks("one")
            await client.search_tracks("two")

        token_requests = [r for r in httpx_mock.get_requests() if r.method == "POST"]
        assert len(token_requests) == 1
        assert token_requests[0].headers["Authorization"].startswith("Basic ")
        assert b"grant_type=client_credentials" in token_requests[0].content


class TestRecommendations:
    """GET /recommendations."""

    async def test_sends_seeds_targets_and_bearer(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock
    ) -> None:
        _token(httpx_mock)
        httpx_mock.add_response(
            method="GET", url=RECOMMENDATIONS_URL, json={"tracks": [{"id": "a"}, {"id": "b"}]}
        )

        async with SpotifyClient(spotify_settings) as client:
            tracks = await client.get_recommendations(
                ["pop", "dance", "funk", "disco", "happy", "upbeat"],
                limit=10,
                target_valence=0.8,
                target_energy=0.7,
                target_danceability=0.8,
            )

        assert [t["id"] for t in tracks] == ["a", "b"]
        request = next(r for r in httpx_mock.get_requests() if r.method == "GET")
        assert request.headers["Authorization"] == "Bearer app-token"
        params = request.url.params
        assert params["seed_genres"] == "pop,dance,funk,disco,happy"
        assert params["limit"] == "10"
        assert params["market"] == "DE"
        assert params["target_valence"] == "0.8"
        assert params["target_energy"] == "0.7"

    async def test_error_status_raises(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock
    ) -> None:
        _token(httpx_mock)
        httpx_mock.add_response(method="GET", url=RECOMMENDATIONS_URL, status_code=503)

        async with SpotifyClient(spotify_settings) as client:
            with pytest.raises(ExternalServiceError) as exc_info:
                await client.get_recommendations(["pop"])
        assert exc_info.value.message == "Spotify recommendations error: 503"

    async def test_transport_error_raises(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock
    ) -> None:
        _token(httpx_mock)
        httpx_mock.add_exception(httpx.ConnectTimeout("timed out"), url=RECOMMENDATIONS_URL)

        async with SpotifyClient(spotify_settings) as client:
            with pytest.raises(ExternalServiceError):
                await client.get_recommendations(["pop"])


class TestTracks:
    """Search and single-track lookups."""

    async def test_search_returns_items(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock
    ) -> None:
        _token(httpx_mock)
        httpx_mock.add_response(
            method="GET", url=SEARCH_URL, json={"tracks": {"items": [{"id": "x"}]}}
        )

        async with SpotifyClient(spotify_settings) as client:
            items = await client.search_tracks("daft punk", limit=3)

        assert items == [{"id": "x"}]
        request = next(r for r in httpx_mock.get_requests() if r.method == "GET")
        assert request.url.params["q"] == "daft punk"
        assert request.url.params["type"] == "track"
        assert request.url.params["limit"] == "3"

    async def test_unknown_track_is_none(
        self, spotify_settings: SpotifySettings, httpx_mock: HTTPXMock
    ) -> None:
        _token(httpx_mock)
        httpx_mock.add_response(
            method="GET",
            url=re.compile(r"https://api\.spotify\.com/v1/tracks/missing.*"),
            status_code=404,
        )

        async with SpotifyClient(spotify_settings) as client:
            assert await client.get_track("missing") is None
