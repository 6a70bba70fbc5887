"""Integration tests for track search, track details and emotion recording."""

from fastapi.testclient import TestClient


class TestSearch:
    """GET /api/music/search and /api/music/tracks/{id}."""

    def test_search_requires_auth(self, client: TestClient) -> None:
        assert client.get("/api/music/search", params={"q": "muse"}).status_code == 401

    def test_search_returns_tracks(
        self, client: TestClient, auth_headers: dict[str, str], provider
    ) -> None:
        response = client.get(
            "/api/music/search", params={"q": "muse", "limit": 2}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["query"] == "muse"
        assert data["totalTracks"] == 2
        assert [t["id"] for t in data["tracks"]] == ["track-1", "track-2"]
        assert provider.searches == [("muse", 2)]

    def test_empty_query_is_400(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.get("/api/music/search", params={"q": ""}, headers=auth_headers)
        assert response.status_code == 400
        assert [e["field"] for e in response.json()["errors"]] == ["q"]

    def test_track_details(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.get("/api/music/tracks/track-2", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Song 2"

    def test_unknown_track_is_404(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.get("/api/music/tracks/does-not-exist", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"message": "Track not found"}


class TestEmotions:
    """POST /api/emotions."""

    def test_record_analysis(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.post(
            "/api/emotions",
            json={"emotion": "surprised", "confidence": 0.66, "metadata": {"faces": 1}},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["emotion"] == "surprised"
        assert data["confidence"] == 0.66
        assert data["metadata"] == {"faces": 1}
        assert data["imageUrl"] is None
        assert data["createdAt"].endswith("Z")

        profile = client.get("/api/user/profile", headers=auth_headers).json()
        assert profile["user"]["totalAnalyses"] == 1

    def test_confidence_is_required(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.post("/api/emotions", json={"emotion": "happy"}, headers=auth_headers)
        assert response.status_code == 400
        assert [e["field"] for e in response.json()["errors"]] == ["confidence"]

    def test_requires_auth(self, client: TestClient) -> None:
        response = client.post("/api/emotions", json={"emotion": "happy", "confidence": 0.5})
        assert response.status_code == 401
