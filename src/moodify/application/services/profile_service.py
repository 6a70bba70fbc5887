"""User profile reads, updates and account deletion."""

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from moodify.application.services.auth_service import verify_password
from moodify.domain.entities import User, UserPreferences, UserStatistics
from moodify.domain.exceptions import (
    BusinessRuleViolation,
    DuplicateEntityException,
    EntityNotFoundException,
)
from moodify.infrastructure.persistence.repositories import (
    UserPreferencesRepository,
    UserRepository,
    UserStatisticsRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class Profile:
    """User row joined with its preferences and counters."""

    user: User
    preferences: UserPreferences
    statistics: UserStatistics | None = None


class ProfileService:
    """Everything behind /api/user/profile."""

    def __init__(self, session: AsyncSession) -> None:
        self._users = UserRepository(session)
        self._preferences = UserPreferencesRepository(session)
        self._statistics = UserStatisticsRepository(session)

    async def _require_user(self, user_id: str) -> User:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundException("User", user_id)
        return user

    async def get_profile(self, user_id: str) -> Profile:
        """Load a profile.

        Raises:
            EntityNotFoundException: The user no longer exists
        """
        user = await self._require_user(user_id)
        preferences = await self._preferences.get(user_id) or UserPreferences(user_id=user_id)
        statistics = await self._statistics.get(user_id)
        return Profile(user=user, preferences=preferences, statistics=statistics)

    async def update_profile(
        self,
        user_id: str,
        name: str,
        email: str,
        bio: str | None = None,
        favorite_genres: list[str] | None = None,
    ) -> Profile:
        """Update name/email and the preference extras.

        Raises:
            EntityNotFoundException: The user no longer exists
            DuplicateEntityException: The new email belongs to another account
        """
        user = await self._require_user(user_id)
        email = email.strip().lower()
        if email != user.email:
            other = await self._users.get_by_email(email)
            if other is not None and other.id != user_id:
                raise DuplicateEntityException("User", email)

        user.name = name.strip()
        user.email = email
        await self._users.update(user)

        preferences = await self._preferences.get(user_id) or UserPreferences(user_id=user_id)
        if bio is not None:
            preferences.bio = bio
        if favorite_genres is not None:
            preferences.preferred_genres = list(favorite_genres)
        await self._preferences.save(preferences)

        logger.info("Updated profile of user %s", user_id, extra={"user_id": user_id})
        statistics = await self._statistics.get(user_id)
        return Profile(user=user, preferences=preferences, statistics=statistics)

    # Listen up, the ONLY row this deletes is the user. Sessions, analyses, recommendations,
    # preferences and statistics vanish through ON DELETE CASCADE inside the same statement.
    # If you ever see orphaned rows after this, the FK pragma/constraint is missing - don't
    # "fix" it by adding deletes here!
    async def delete_account(self, user_id: str, confirm_email: str, confirm_password: str) -> None:
        """Permanently delete an account after email and password confirmation.

        Raises:
            EntityNotFoundException: The user no longer exists
            BusinessRuleViolation: Confirmation email or password is wrong
        """
        user = await self._require_user(user_id)
        if confirm_email.strip().lower() != user.email:
            raise BusinessRuleViolation("Confirmation email does not match")

        valid = await asyncio.to_thread(verify_password, confirm_password, user.password_hash)
        if not valid:
            raise BusinessRuleViolation("Incorrect password")

        await self._users.delete(user_id)
        logger.info("Deleted account of user %s", user_id, extra={"user_id": user_id})
