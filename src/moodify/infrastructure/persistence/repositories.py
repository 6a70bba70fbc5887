"""Repository implementations for domain entities."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from moodify.domain.entities import (
    CookieSession,
    EmotionAnalysis,
    RecommendationRecord,
    User,
    UserPreferences,
    UserStatistics,
    new_id,
    utc_now,
)
from moodify.domain.exceptions import EntityNotFoundException, PersistenceError
from moodify.domain.ports import (
    IEmotionAnalysisRepository,
    IRecommendationRepository,
    ISessionRepository,
    IUserPreferencesRepository,
    IUserRepository,
    IUserStatisticsRepository,
)
from moodify.domain.value_objects import Emotion

from .models import (
    EmotionAnalysisModel,
    MusicRecommendationModel,
    SessionModel,
    UserModel,
    UserPreferencesModel,
    UserStatisticsModel,
    ensure_utc_aware,
)


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of User repository."""

    # Hey future me, this is the Repository pattern! Each repo gets the AsyncSession of the current
    # unit of work injected. It NEVER commits - Database.session_scope() does that on clean exit.
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, user: User) -> None:
        """Add a new user."""
        self.session.add(
            UserModel(
                id=user.id,
                email=user.email,
                name=user.name,
                image=user.image,
                password_hash=user.password_hash,
                created_at=user.created_at,
                updated_at=user.updated_at,
            )
        )
        # flush so a duplicate email surfaces as IntegrityError right here
        await self.session.flush()

    async def update(self, user: User) -> None:
        """Update an existing user."""
        model = await self.session.get(UserModel, user.id)
        if not model:
            raise EntityNotFoundException("User", user.id)

        model.name = user.name
        model.email = user.email
        model.image = user.image
        model.password_hash = user.password_hash
        model.updated_at = utc_now()

    # Listen up, this is a CORE delete statement on purpose, not session.delete(model)! The
    # database's ON DELETE CASCADE removes sessions, analyses, recommendations, preferences and
    # statistics atomically. Loading the ORM object first would let the unit of work try to
    # null out children itself.
    async def delete(self, user_id: str) -> None:
        """Delete a user, children go via FK cascade."""
        result = await self.session.execute(delete(UserModel).where(UserModel.id == user_id))
        if result.rowcount == 0:  # type: ignore[attr-defined]
            raise EntityNotFoundException("User", user_id)

    async def get_by_id(self, user_id: str) -> User | None:
        """Get a user by id."""
        model = await self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email (case-insensitive)."""
        stmt = select(UserModel).where(UserModel.email == email.strip().lower())
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            email=model.email,
            name=model.name,
            image=model.image,
            password_hash=model.password_hash,
            created_at=ensure_utc_aware(model.created_at),
            updated_at=ensure_utc_aware(model.updated_at),
        )


class SessionRepository(ISessionRepository):
    """Repository for cookie session persistence."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, session_data: CookieSession) -> None:
        """Create a new session row."""
        self.session.add(
            SessionModel(
                session_token=session_data.session_token,
                user_id=session_data.user_id,
                expires=session_data.expires,
                created_at=session_data.created_at,
            )
        )

    # Yo, get() does NOT check expiry - the caller decides what an expired session means
    # (the resolver treats it as "no identity"). Keeps this repo dumb.
    async def get(self, session_token: str) -> CookieSession | None:
        """Get a session by its token."""
        stmt = select(SessionModel).where(SessionModel.session_token == session_token)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        if not model:
            return None
        return CookieSession(
            session_token=model.session_token,
            user_id=model.user_id,
            expires=ensure_utc_aware(model.expires),
            created_at=ensure_utc_aware(model.created_at),
        )

    async def delete(self, session_token: str) -> bool:
        """Delete a session, True if it existed."""
        result = await self.session.execute(
            delete(SessionModel).where(SessionModel.session_token == session_token)
        )
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def delete_expired(self, now: datetime | None = None) -> int:
        """Remove sessions past their expiry, returns how many went."""
        result = await self.session.execute(
            delete(SessionModel).where(SessionModel.expires <= (now or utc_now()))
        )
        return int(result.rowcount or 0)  # type: ignore[attr-defined]


class RecommendationRepository(IRecommendationRepository):
    """Repository for archived recommendation snapshots."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, record: RecommendationRecord) -> None:
        """Stage a recommendation record for insert."""
        self.session.add(
            MusicRecommendationModel(
                id=record.id,
                user_id=record.user_id,
                emotion=Emotion(record.emotion).value,
                track_id=record.track_id,
                track_name=record.track_name,
                artist_name=record.artist_name,
                album_name=record.album_name,
                track_url=record.track_url,
                image_url=record.image_url,
                duration_ms=record.duration_ms,
                popularity=record.popularity,
                audio_features=record.audio_features,
                created_at=record.created_at,
            )
        )

    async def list_for_user(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[RecommendationRecord]:
        """List a user's records, newest first, optionally bounded by created_at."""
        stmt = select(MusicRecommendationModel).where(
            MusicRecommendationModel.user_id == user_id
        )
        if start is not None:
            stmt = stmt.where(MusicRecommendationModel.created_at >= start)
        if end is not None:
            stmt = stmt.where(MusicRecommendationModel.created_at <= end)
        stmt = stmt.order_by(MusicRecommendationModel.created_at.desc())

        result = await self.session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars().all()]

    async def delete_for_user(self, record_id: str, user_id: str) -> bool:
        """Delete one record, only if the user owns it."""
        result = await self.session.execute(
            delete(MusicRecommendationModel).where(
                MusicRecommendationModel.id == record_id,
                MusicRecommendationModel.user_id == user_id,
            )
        )
        return bool(result.rowcount)  # type: ignore[attr-defined]

    @staticmethod
    def _to_entity(model: MusicRecommendationModel) -> RecommendationRecord:
        return RecommendationRecord(
            id=model.id,
            user_id=model.user_id,
            emotion=Emotion(model.emotion),
            track_id=model.track_id,
            track_name=model.track_name,
            artist_name=model.artist_name,
            album_name=model.album_name,
            track_url=model.track_url,
            image_url=model.image_url,
            duration_ms=model.duration_ms,
            popularity=model.popularity,
            audio_features=model.audio_features,
            created_at=ensure_utc_aware(model.created_at),
        )


class EmotionAnalysisRepository(IEmotionAnalysisRepository):
    """Repository for recorded emotion analyses."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, analysis: EmotionAnalysis) -> None:
        """Stage an analysis for insert."""
        self.session.add(
            EmotionAnalysisModel(
                id=analysis.id,
                user_id=analysis.user_id,
                emotion=Emotion(analysis.emotion).value,
                confidence=analysis.confidence,
                image_url=analysis.image_url,
                analysis_metadata=analysis.metadata,
                created_at=analysis.created_at,
            )
        )

    async def list_for_user(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[EmotionAnalysis]:
        """List a user's analyses, newest first, optionally bounded by created_at."""
        stmt = select(EmotionAnalysisModel).where(EmotionAnalysisModel.user_id == user_id)
        if start is not None:
            stmt = stmt.where(EmotionAnalysisModel.created_at >= start)
        if end is not None:
            stmt = stmt.where(EmotionAnalysisModel.created_at <= end)
        stmt = stmt.order_by(EmotionAnalysisModel.created_at.desc())

        result = await self.session.execute(stmt)
        return [
            EmotionAnalysis(
                id=m.id,
                user_id=m.user_id,
                emotion=Emotion(m.emotion),
                confidence=m.confidence,
                image_url=m.image_url,
                metadata=m.analysis_metadata,
                created_at=ensure_utc_aware(m.created_at),
            )
            for m in result.scalars().all()
        ]

    async def delete_for_user(self, analysis_id: str, user_id: str) -> bool:
        """Delete one analysis, only if the user owns it."""
        result = await self.session.execute(
            delete(EmotionAnalysisModel).where(
                EmotionAnalysisModel.id == analysis_id,
                EmotionAnalysisModel.user_id == user_id,
            )
        )
        return bool(result.rowcount)  # type: ignore[attr-defined]


# Hey future me - the counters are bumped with a single INSERT ... ON CONFLICT (user_id) DO UPDATE
# SET total = total + 1. That's an atomic read-modify-write in the ENGINE, so N concurrent
# requests for the same user always end with exactly +N. Never do "select, add one, update" in
# Python here, that loses increments under concurrency!
# SQLite (>= 3.24) and PostgreSQL both speak this syntax, SQLAlchemy just needs the dialect's insert().
class UserStatisticsRepository(IUserStatisticsRepository):
    """Repository for per-user usage counters."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, user_id: str) -> UserStatistics | None:
        """Get statistics for a user."""
        stmt = select(UserStatisticsModel).where(UserStatisticsModel.user_id == user_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        if not model:
            return None
        return UserStatistics(
            user_id=model.user_id,
            total_analyses=model.total_analyses,
            total_recommendations=model.total_recommendations,
            last_activity=ensure_utc_aware(model.last_activity) if model.last_activity else None,
            calculated_at=ensure_utc_aware(model.calculated_at),
        )

    async def increment_recommendations(self, user_id: str) -> None:
        """Bump total_recommendations by one, creating the row if needed."""
        await self._increment(user_id, "total_recommendations")

    async def increment_analyses(self, user_id: str) -> None:
        """Bump total_analyses by one, creating the row if needed."""
        await self._increment(user_id, "total_analyses")

    async def _increment(self, user_id: str, counter: str) -> None:
        now = utc_now()
        values: dict[str, Any] = {
            "id": new_id(),
            "user_id": user_id,
            "total_analyses": 0,
            "total_recommendations": 0,
            "last_activity": now,
            "calculated_at": now,
        }
        values[counter] = 1

        insert = self._dialect_insert()
        stmt = insert(UserStatisticsModel).values(**values)
        column = getattr(UserStatisticsModel, counter)
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserStatisticsModel.user_id],
            set_={counter: column + 1, "last_activity": now, "calculated_at": now},
        )
        await self.session.execute(stmt)

    def _dialect_insert(self) -> Any:
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            return sqlite_insert
        if dialect == "postgresql":
            return pg_insert
        raise PersistenceError(f"Atomic statistics upsert not supported on '{dialect}'")


class UserPreferencesRepository(IUserPreferencesRepository):
    """Repository for profile preferences."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, user_id: str) -> UserPreferences | None:
        """Get preferences for a user."""
        model = await self._get_model(user_id)
        if not model:
            return None
        return UserPreferences(
            user_id=model.user_id,
            bio=model.bio,
            preferred_genres=list(model.preferred_genres or []),
            explicit_content_allowed=model.explicit_content_allowed,
        )

    async def save(self, preferences: UserPreferences) -> None:
        """Insert or replace preferences for a user."""
        model = await self._get_model(preferences.user_id)
        if model is None:
            model = UserPreferencesModel(user_id=preferences.user_id)
            self.session.add(model)
        model.bio = preferences.bio
        model.preferred_genres = list(preferences.preferred_genres)
        model.explicit_content_allowed = preferences.explicit_content_allowed
        model.updated_at = utc_now()

    async def _get_model(self, user_id: str) -> UserPreferencesModel | None:
        stmt = select(UserPreferencesModel).where(UserPreferencesModel.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


__all__ = [
    "EmotionAnalysisRepository",
    "RecommendationRepository",
    "SessionRepository",
    "UserPreferencesRepository",
    "UserRepository",
    "UserStatisticsRepository",
]
