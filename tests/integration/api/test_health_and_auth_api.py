"""Integration tests for the health check and the auth endpoints."""

from unittest.mock import patch

from fastapi.testclient import TestClient

from moodify.config import Settings


class TestHealth:
    """GET /api/health."""

    def test_healthy_payload_and_headers(self, client: TestClient) -> None:
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"
        assert body["environment"] == "test"
        assert body["timestamp"].endswith("Z")
        assert body["uptime"] >= 0
        assert body["checks"]["server"] == "ok"
        assert set(body["checks"]["memory"]) == {"rss", "heapTotal", "heapUsed"}
        assert response.headers["Cache-Control"] == "no-store, max-age=0"
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert response.headers["Access-Control-Allow-Methods"] == "GET, OPTIONS"

    def test_needs_no_authentication(self, client: TestClient) -> None:
        response = client.get("/api/health", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 200

    def test_failure_is_503(self, client: TestClient) -> None:
        with patch(
            "moodify.api.routers.health.collect_health",
            side_effect=RuntimeError("process table unavailable"),
        ):
            response = client.get("/api/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["error"] == "process table unavailable"
        assert "timestamp" in body

    def test_preflight(self, client: TestClient) -> None:
        response = client.options("/api/health")
        assert response.status_code == 200
        assert response.headers["Access-Control-Allow-Methods"] == "GET, OPTIONS"
        assert response.headers["Access-Control-Max-Age"] == "86400"


class TestRegistration:
    """POST /api/auth/register."""

    def test_register_returns_public_user(self, client: TestClient) -> None:
        response = client.post(
            "/api/auth/register",
            json={"name": "Alice", "email": "Alice@Example.com", "password": "wonderland"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User created successfully"
        assert body["user"]["email"] == "alice@example.com"
        assert body["user"]["name"] == "Alice"
        assert set(body["user"]) == {"id", "name", "email", "image"}

    def test_duplicate_email_is_409(self, client: TestClient) -> None:
        payload = {"name": "Alice", "email": "alice@example.com", "password": "wonderland"}
        assert client.post("/api/auth/register", json=payload).status_code == 201

        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 409
        assert response.json() == {"message": "User already exists"}

    def test_invalid_body_is_400(self, client: TestClient) -> None:
        response = client.post(
            "/api/auth/register", json={"name": "A", "email": "nope", "password": "short"}
        )
        assert response.status_code == 400
        assert {e["field"] for e in response.json()["errors"]} == {"name", "email", "password"}


class TestLoginLogout:
    """Login hands out a bearer token and a session cookie."""

    def _register(self, client: TestClient) -> None:
        client.post(
            "/api/auth/register",
            json={"name": "Bob", "email": "bob@example.com", "password": "builder-bob"},
        )

    def test_wrong_password_is_401(self, client: TestClient) -> None:
        self._register(client)
        response = client.post(
            "/api/auth/login", json={"email": "bob@example.com", "password": "not-bobs"}
        )
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid email or password"}

    def test_session_cookie_authenticates(self, client: TestClient, settings: Settings) -> None:
        self._register(client)
        response = client.post(
            "/api/auth/login", json={"email": "bob@example.com", "password": "builder-bob"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["token"]
        assert settings.auth.session_cookie_name in client.cookies

        # cookie only, no Authorization header
        profile = client.get("/api/user/profile")
        assert profile.status_code == 200
        assert profile.json()["user"]["email"] == "bob@example.com"

    def test_bearer_token_authenticates(self, client: TestClient) -> None:
        self._register(client)
        token = client.post(
            "/api/auth/login", json={"email": "bob@example.com", "password": "builder-bob"}
        ).json()["token"]
        client.cookies.clear()

        profile = client.get("/api/user/profile", headers={"Authorization": f"bearer {token}"})
        assert profile.status_code == 200

    def test_logout_ends_the_cookie_session(self, client: TestClient) -> None:
        self._register(client)
        client.post(
            "/api/auth/login", json={"email": "bob@example.com", "password": "builder-bob"}
        )

        response = client.post("/api/auth/logout")
        assert response.status_code == 200
        assert response.json() == {"message": "Logged out"}

        assert client.get("/api/user/profile").status_code == 401
