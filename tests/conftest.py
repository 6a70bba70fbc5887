"""Shared test fixtures."""

from collections.abc import AsyncGenerator, Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from moodify.config import (
    AuthSettings,
    DatabaseSettings,
    ObservabilitySettings,
    Settings,
    SpotifySettings,
)
from moodify.domain.entities import Track, User
from moodify.domain.ports import IRecommendationProvider
from moodify.domain.value_objects import Emotion
from moodify.infrastructure.persistence import Database, UserRepository
from moodify.main import create_app

TEST_PASSWORD = "correct-horse-battery"


def make_track(index: int = 1, **overrides: object) -> Track:
    """Build a domain Track with predictable values."""
    values: dict[str, object] = {
        "id": f"track-{index}",
        "name": f"Song {index}",
        "artist": f"Artist {index}",
        "album": f"Album {index}",
        "duration": 200 + index,
        "spotify_url": f"https://open.spotify.com/track/track-{index}",
        "preview_url": None,
        "image_url": f"https://i.scdn.co/image/{index}",
        "popularity": 60 + index,
    }
    values.update(overrides)
    return Track(**values)  # type: ignore[arg-type]


# Hey future me - this stands in for Spotify in every API test. It records each call so tests can
# assert "exactly one provider call", and `fail = True` turns it into a broken upstream.
class FakeRecommendationProvider(IRecommendationProvider):
    """In-memory provider with canned tracks."""

    def __init__(self, tracks: list[Track] | None = None) -> None:
        self.tracks = tracks if tracks is not None else [make_track(i) for i in range(1, 4)]
        self.fail = False
        self.calls: list[tuple[Emotion, int]] = []
        self.searches: list[tuple[str, int]] = []
        self.closed = False

    async def get_recommendations_by_emotion(
        self, emotion: Emotion, limit: int = 20
    ) -> list[Track]:
        self.calls.append((emotion, limit))
        if self.fail:
            raise RuntimeError("upstream exploded")
        return self.tracks[:limit]

    async def search_tracks(self, query: str, limit: int = 20) -> list[Track]:
        self.searches.append((query, limit))
        return self.tracks[:limit]

    async def get_track(self, track_id: str) -> Track | None:
        return next((t for t in self.tracks if t.id == track_id), None)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throw-away SQLite file, cheap bcrypt rounds."""
    return Settings(
        environment="test",
        database=DatabaseSettings(
            url=f"sqlite+aiosqlite:///{tmp_path / 'moodify-test.db'}",
            create_tables=True,
        ),
        spotify=SpotifySettings(client_id="test-id", client_secret="test-secret"),
        auth=AuthSettings(
            jwt_secret="moodify-suite-signing-secret-0123456789abcdef",
            bcrypt_rounds=4,
        ),
        observability=ObservabilitySettings(log_level="WARNING"),
    )


@pytest.fixture
async def db(settings: Settings) -> AsyncGenerator[Database, None]:
    """Database with all tables created."""
    database = Database(settings)
    await database.create_tables()
    yield database
    await database.close()


@pytest.fixture
async def user(db: Database) -> User:
    """A persisted user without a password."""
    account = User(email="listener@example.com", name="Listener")
    async with db.session_scope() as session:
        await UserRepository(session).add(account)
    return account


@pytest.fixture
def provider() -> FakeRecommendationProvider:
    """Fake recommendation provider."""
    return FakeRecommendationProvider()


@pytest.fixture
def app(settings: Settings, provider: FakeRecommendationProvider) -> FastAPI:
    """Application wired to the test database and the fake provider."""
    return create_app(settings, recommendation_provider=provider)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Test client with the lifespan running (tables created on startup)."""
    with TestClient(app) as test_client:
        yield test_client


def register_and_login(
    client: TestClient,
    email: str = "listener@example.com",
    name: str = "Listener",
    password: str = TEST_PASSWORD,
) -> dict[str, str]:
    """Create an account through the API and return bearer auth headers for it."""
    response = client.post(
        "/api/auth/register", json={"name": name, "email": email, "password": password}
    )
    assert response.status_code == 201, response.text
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    # only the bearer token should authenticate these requests
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    """Bearer headers of a freshly registered user."""
    return register_and_login(client)


@pytest.fixture
def register_user(client: TestClient):  # type: ignore[no-untyped-def]
    """Function registering another account, returns its bearer headers."""

    def _register(email: str, name: str = "Another Listener") -> dict[str, str]:
        return register_and_login(client, email=email, name=name)

    return _register


@pytest.fixture
def track_factory():  # type: ignore[no-untyped-def]
    """The make_track helper, for tests that need custom tracks."""
    return make_track
