"""Account registration, login and logout."""

import asyncio
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from moodify.application.services.identity_resolver import issue_access_token
from moodify.config.settings import AuthSettings
from moodify.domain.entities import CookieSession, User, utc_now
from moodify.domain.exceptions import AuthenticationError, DuplicateEntityException
from moodify.infrastructure.persistence.repositories import SessionRepository, UserRepository

logger = logging.getLogger(__name__)

# bcrypt only ever looks at the first 72 bytes, newer releases raise beyond that
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a password against a stored bcrypt hash."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


@dataclass
class LoginResult:
    """Outcome of a successful login."""

    user: User
    access_token: str
    session: CookieSession


class AuthService:
    """Register users and open/close their sessions."""

    def __init__(self, session: AsyncSession, settings: AuthSettings) -> None:
        self._users = UserRepository(session)
        self._sessions = SessionRepository(session)
        self._settings = settings

    async def register(self, name: str, email: str, password: str) -> User:
        """Create an account.

        Raises:
            DuplicateEntityException: The email is already registered
        """
        email = email.strip().lower()
        if await self._users.get_by_email(email) is not None:
            raise DuplicateEntityException("User", email)

        # bcrypt is CPU bound, keep it off the event loop
        password_hash = await asyncio.to_thread(
            hash_password, password, self._settings.bcrypt_rounds
        )
        user = User(email=email, name=name.strip(), password_hash=password_hash)
        try:
            await self._users.add(user)
        except IntegrityError as e:
            # lost a race against a concurrent registration with the same email
            raise DuplicateEntityException("User", email) from e

        logger.info("Registered user %s", user.id, extra={"user_id": user.id})
        return user

    # Hey future me - wrong email and wrong password give the SAME error on purpose, so the
    # endpoint can't be used to probe which addresses have accounts.
    async def login(self, email: str, password: str) -> LoginResult:
        """Check credentials, then issue a bearer token and a cookie session.

        Raises:
            AuthenticationError: Unknown email or wrong password
        """
        user = await self._users.get_by_email(email)
        valid = user is not None and await asyncio.to_thread(
            verify_password, password, user.password_hash
        )
        if user is None or not valid:
            logger.info("Failed login attempt")
            raise AuthenticationError("Invalid email or password")

        now = utc_now()
        cookie_session = CookieSession(
            session_token=secrets.token_urlsafe(32),
            user_id=user.id,
            expires=now + timedelta(seconds=self._settings.session_max_age),
            created_at=now,
        )
        await self._sessions.create(cookie_session)

        token = issue_access_token(user, self._settings, now=now)
        logger.info("User %s logged in", user.id, extra={"user_id": user.id})
        return LoginResult(user=user, access_token=token, session=cookie_session)

    async def logout(self, session_token: str | None) -> bool:
        """Drop a cookie session, True if one existed."""
        if not session_token:
            return False
        return await self._sessions.delete(session_token)
