"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from datetime import datetime

from moodify.domain.entities import (
    CookieSession,
    EmotionAnalysis,
    RecommendationRecord,
    Track,
    User,
    UserPreferences,
    UserStatistics,
)
from moodify.domain.value_objects import Emotion


# Hey future me - this is the ONLY thing the recommendation flow knows about Spotify!
# The orchestrator treats it as a black box: whatever it raises becomes a ProviderError.
# No retries or caching on our side - that's the provider SDK's business.
class IRecommendationProvider(ABC):
    """Port for the external track/recommendation source."""

    @abstractmethod
    async def get_recommendations_by_emotion(
        self, emotion: Emotion, limit: int = 20
    ) -> list[Track]:
        """Get tracks matching an emotion."""
        pass

    @abstractmethod
    async def search_tracks(self, query: str, limit: int = 20) -> list[Track]:
        """Search tracks by free text."""
        pass

    @abstractmethod
    async def get_track(self, track_id: str) -> Track | None:
        """Get one track, or None if the provider doesn't know it."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        pass


class IUserRepository(ABC):
    """Repository interface for User accounts."""

    @abstractmethod
    async def add(self, user: User) -> None:
        """Add a new user."""
        pass

    @abstractmethod
    async def update(self, user: User) -> None:
        """Update an existing user."""
        pass

    @abstractmethod
    async def delete(self, user_id: str) -> None:
        """Delete a user (children go via FK cascade)."""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None:
        """Get a user by id."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email."""
        pass


class ISessionRepository(ABC):
    """Repository interface for cookie sessions."""

    @abstractmethod
    async def create(self, session_data: CookieSession) -> None:
        """Create a new session."""
        pass

    @abstractmethod
    async def get(self, session_token: str) -> CookieSession | None:
        """Get a session by its token."""
        pass

    @abstractmethod
    async def delete(self, session_token: str) -> bool:
        """Delete a session, True if it existed."""
        pass


class IRecommendationRepository(ABC):
    """Repository interface for archived recommendations."""

    @abstractmethod
    async def add(self, record: RecommendationRecord) -> None:
        """Add a recommendation record."""
        pass

    @abstractmethod
    async def list_for_user(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[RecommendationRecord]:
        """List a user's records, newest first."""
        pass

    @abstractmethod
    async def delete_for_user(self, record_id: str, user_id: str) -> bool:
        """Delete one record owned by the user."""
        pass


class IEmotionAnalysisRepository(ABC):
    """Repository interface for recorded emotion analyses."""

    @abstractmethod
    async def add(self, analysis: EmotionAnalysis) -> None:
        """Add an emotion analysis."""
        pass

    @abstractmethod
    async def list_for_user(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[EmotionAnalysis]:
        """List a user's analyses, newest first."""
        pass

    @abstractmethod
    async def delete_for_user(self, analysis_id: str, user_id: str) -> bool:
        """Delete one analysis owned by the user."""
        pass


class IUserStatisticsRepository(ABC):
    """Repository interface for per-user aggregate counters."""

    @abstractmethod
    async def get(self, user_id: str) -> UserStatistics | None:
        """Get statistics for a user."""
        pass

    @abstractmethod
    async def increment_recommendations(self, user_id: str) -> None:
        """Atomically bump total_recommendations (creating the row if needed)."""
        pass

    @abstractmethod
    async def increment_analyses(self, user_id: str) -> None:
        """Atomically bump total_analyses (creating the row if needed)."""
        pass


class IUserPreferencesRepository(ABC):
    """Repository interface for profile preferences."""

    @abstractmethod
    async def get(self, user_id: str) -> UserPreferences | None:
        """Get preferences for a user."""
        pass

    @abstractmethod
    async def save(self, preferences: UserPreferences) -> None:
        """Insert or replace preferences for a user."""
        pass


# Yo, this is the best-effort side channel of the recommendation flow. Implementations MUST
# run in their own unit of work - a failure here may never poison the caller's transaction.
class IRecommendationHistoryStore(ABC):
    """Port for archiving a recommendation and bumping usage counters."""

    @abstractmethod
    async def record(self, record: RecommendationRecord) -> None:
        """Persist the record and increment the owner's statistics."""
        pass


__all__ = [
    "IEmotionAnalysisRepository",
    "IRecommendationHistoryStore",
    "IRecommendationProvider",
    "IRecommendationRepository",
    "ISessionRepository",
    "IUserPreferencesRepository",
    "IUserRepository",
    "IUserStatisticsRepository",
]
