"""SQLAlchemy ORM models for Moodify."""

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# Hey future me, utc_now() ensures ALL timestamps are UTC! Never use datetime.now() without
# timezone - naive datetimes break comparisons between servers in different timezones.
def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


# Hey future me - SQLite doesn't preserve timezone info! UTC datetimes come back naive.
# ALWAYS run DB datetimes through this before comparing with datetime.now(UTC), otherwise
# you get "can't compare offset-naive and offset-aware datetimes".
def ensure_utc_aware(dt: datetime) -> datetime:
    """Ensure datetime is UTC-aware, assuming naive datetimes are UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def _uuid() -> str:
    return str(uuid.uuid4())


EMOTION_VALUES = ("happy", "sad", "angry", "surprised", "neutral", "fear", "disgust")
_EMOTION_CHECK = "emotion IN ({})".format(", ".join(f"'{e}'" for e in EMOTION_VALUES))


class Base(DeclarativeBase):
    """Base class for all ORM models.

    All models inherit from this to use the same metadata registry.
    """

    pass


# Listen up, UserModel OWNS everything below it. Every child table has
# ForeignKey("users.id", ondelete="CASCADE") - deleting a user row makes the DATABASE remove
# sessions, analyses, recommendations, preferences and statistics in the same statement.
# The relationships use passive_deletes=True so the ORM never loads children to delete them
# itself. Don't switch to cascade="all, delete-orphan" here - the engine is the source of truth!
# SQLite needs PRAGMA foreign_keys=ON for this (Database does that on connect).
class UserModel(Base):
    """Registered user account."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    email_verified: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    sessions: Mapped[list["SessionModel"]] = relationship(
        back_populates="user", passive_deletes=True
    )
    emotion_analyses: Mapped[list["EmotionAnalysisModel"]] = relationship(
        back_populates="user", passive_deletes=True
    )
    recommendations: Mapped[list["MusicRecommendationModel"]] = relationship(
        back_populates="user", passive_deletes=True
    )
    preferences: Mapped["UserPreferencesModel | None"] = relationship(
        back_populates="user", passive_deletes=True
    )
    statistics: Mapped["UserStatisticsModel | None"] = relationship(
        back_populates="user", passive_deletes=True
    )


class SessionModel(Base):
    """Cookie session, identified by the opaque session_token cookie value."""

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    session_token: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expires: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utc_now, server_default=func.now()
    )

    user: Mapped[UserModel] = relationship(back_populates="sessions")


class EmotionAnalysisModel(Base):
    """Recorded emotion classification result."""

    __tablename__ = "emotion_analyses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    emotion: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    # "metadata" is reserved on declarative classes, hence the attribute name
    analysis_metadata: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSON, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utc_now, index=True
    )

    user: Mapped[UserModel] = relationship(back_populates="emotion_analyses")

    __table_args__ = (
        CheckConstraint(_EMOTION_CHECK, name="ck_emotion_analyses_emotion"),
        CheckConstraint(
            "confidence >= 0 AND confidence <= 1", name="ck_emotion_analyses_confidence"
        ),
        Index("ix_emotion_analyses_user_emotion", "user_id", "emotion"),
    )


class MusicRecommendationModel(Base):
    """Archived snapshot of one generated recommendation (never updated)."""

    __tablename__ = "music_recommendations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # SET NULL, not CASCADE - a recommendation outlives the analysis that triggered it
    emotion_analysis_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("emotion_analyses.id", ondelete="SET NULL"), nullable=True
    )
    emotion: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    track_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    track_name: Mapped[str] = mapped_column(String(500), nullable=False)
    artist_name: Mapped[str] = mapped_column(String(500), nullable=False)
    album_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    track_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    popularity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    audio_features: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    was_played: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.false()
    )
    user_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utc_now, index=True
    )

    user: Mapped[UserModel] = relationship(back_populates="recommendations")

    __table_args__ = (
        CheckConstraint(
            "popularity IS NULL OR (popularity >= 0 AND popularity <= 100)",
            name="ck_music_recommendations_popularity",
        ),
        CheckConstraint(
            "user_rating IS NULL OR (user_rating >= 1 AND user_rating <= 5)",
            name="ck_music_recommendations_user_rating",
        ),
    )


class UserPreferencesModel(Base):
    """Profile extras, one row per user."""

    __tablename__ = "user_preferences"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    bio: Mapped[str | None] = mapped_column(String(200), nullable=True)
    preferred_genres: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    explicit_content_allowed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.false()
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    user: Mapped[UserModel] = relationship(back_populates="preferences")


# Hey future me - user_id is UNIQUE on purpose: the statistics upsert is
# INSERT ... ON CONFLICT (user_id) DO UPDATE and needs that constraint as its arbiter.
# Counters only ever go up, see UserStatisticsRepository.
class UserStatisticsModel(Base):
    """Aggregate usage counters, one row per user."""

    __tablename__ = "user_statistics"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    total_analyses: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    total_recommendations: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    most_common_emotion: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_activity: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    calculated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utc_now
    )

    user: Mapped[UserModel] = relationship(back_populates="statistics")
