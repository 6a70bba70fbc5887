"""Response schemas. Field names are snake_case in Python, camelCase on the wire."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from moodify.application.services.profile_service import Profile
from moodify.domain.entities import HistoryEntry, Track, User


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class TrackSchema(_CamelModel):
    """Track as sent to clients."""

    id: str
    name: str
    artist: str
    album: str
    duration: int = Field(description="Duration in seconds")
    preview_url: str | None = None
    image_url: str | None = None
    spotify_url: str
    popularity: int | None = None

    @classmethod
    def from_entity(cls, track: Track) -> "TrackSchema":
        return cls(
            id=track.id,
            name=track.name,
            artist=track.artist,
            album=track.album,
            duration=track.duration,
            preview_url=track.preview_url,
            image_url=track.image_url,
            spotify_url=track.spotify_url,
            popularity=track.popularity,
        )


class AuthUserSchema(_CamelModel):
    """Public part of a user account (never the password hash)."""

    id: str
    name: str | None = None
    email: str
    image: str | None = None

    @classmethod
    def from_entity(cls, user: User) -> "AuthUserSchema":
        return cls(id=user.id, name=user.name, email=user.email, image=user.image)


class ProfileSchema(_CamelModel):
    """User profile with preferences and counters."""

    id: str
    name: str | None = None
    email: str
    image: str | None = None
    bio: str = ""
    favorite_genres: list[str] = Field(default_factory=list)
    join_date: datetime
    total_analyses: int = 0
    total_recommendations: int = 0

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileSchema":
        stats = profile.statistics
        return cls(
            id=profile.user.id,
            name=profile.user.name,
            email=profile.user.email,
            image=profile.user.image,
            bio=profile.preferences.bio or "",
            favorite_genres=list(profile.preferences.preferred_genres),
            join_date=profile.user.created_at,
            total_analyses=stats.total_analyses if stats else 0,
            total_recommendations=stats.total_recommendations if stats else 0,
        )


class HistoryEntrySchema(_CamelModel):
    """One history item."""

    id: str
    type: str
    data: dict[str, Any]
    created_at: datetime

    @classmethod
    def from_entity(cls, entry: HistoryEntry) -> "HistoryEntrySchema":
        return cls(id=entry.id, type=entry.type, data=entry.data, created_at=entry.created_at)
