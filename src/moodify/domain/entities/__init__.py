"""Domain entities."""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from moodify.domain.value_objects import Emotion


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


def new_id() -> str:
    """Generate a new UUID4 string id."""
    return str(uuid.uuid4())


# Hey future me, Identity is REQUEST SCOPED - resolved once by the resolver chain and thrown away
# after the response. Never persist it. email/name are only filled when the source knows them
# (session rows join the user, bearer tokens carry them as claims).
@dataclass(frozen=True)
class Identity:
    """Resolved caller identity."""

    user_id: str
    email: str | None = None
    name: str | None = None
    source: str = "unknown"


@dataclass(frozen=True)
class Track:
    """Track as returned by the recommendation provider.

    duration is in SECONDS (the provider converts from milliseconds).
    """

    id: str
    name: str
    artist: str
    album: str
    duration: int
    spotify_url: str
    preview_url: str | None = None
    image_url: str | None = None
    popularity: int | None = None


@dataclass
class User:
    """Registered user account."""

    email: str
    name: str | None = None
    image: str | None = None
    password_hash: str | None = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


@dataclass
class CookieSession:
    """Browser session referenced by the session cookie."""

    session_token: str
    user_id: str
    expires: datetime
    created_at: datetime = field(default_factory=utc_now)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the session is past its expiry."""
        return (now or utc_now()) >= self.expires


# Listen up, RecommendationRecord is a SNAPSHOT - written once per successful recommendation and
# never updated. Only the first track is archived (plus a feature blob), the full tracklist is
# only ever sent to the caller. It dies with its user via the FK cascade, nothing else deletes it.
@dataclass
class RecommendationRecord:
    """Archived snapshot of one generated recommendation."""

    user_id: str
    emotion: Emotion
    track_id: str
    track_name: str
    artist_name: str
    album_name: str | None = None
    track_url: str | None = None
    image_url: str | None = None
    duration_ms: int | None = None
    popularity: int | None = None
    audio_features: dict[str, Any] | None = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class EmotionAnalysis:
    """Recorded result of one emotion classification."""

    user_id: str
    emotion: Emotion
    confidence: float
    image_url: str | None = None
    metadata: dict[str, Any] | None = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class UserStatistics:
    """Aggregate usage counters, one row per user."""

    user_id: str
    total_analyses: int = 0
    total_recommendations: int = 0
    last_activity: datetime | None = None
    calculated_at: datetime | None = None


@dataclass
class UserPreferences:
    """Profile extras kept next to the user row."""

    user_id: str
    bio: str | None = None
    preferred_genres: list[str] = field(default_factory=list)
    explicit_content_allowed: bool = False


@dataclass
class HistoryEntry:
    """One item of the user's activity history."""

    id: str
    type: str  # "emotion" | "recommendation"
    data: dict[str, Any]
    created_at: datetime


__all__ = [
    "CookieSession",
    "EmotionAnalysis",
    "HistoryEntry",
    "Identity",
    "RecommendationRecord",
    "Track",
    "User",
    "UserPreferences",
    "UserStatistics",
    "new_id",
    "utc_now",
]
