"""Caller identity resolution.

An ordered chain of resolvers. Each one looks at the request credentials and
either returns an Identity or None; the first non-None answer wins. Nothing
resolved means the caller is anonymous and protected endpoints answer 401.

Default order:
1. SessionCookieResolver (browser session cookie → ``sessions`` table)
2. BearerTokenResolver (``Authorization: Bearer <JWT>``)
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

import jwt

from moodify.config.settings import AuthSettings
from moodify.domain.entities import Identity, User, utc_now
from moodify.domain.exceptions import AuthenticationError
from moodify.infrastructure.persistence.database import Database
from moodify.infrastructure.persistence.repositories import SessionRepository, UserRepository

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class Credentials:
    """Raw credentials carried by a request."""

    cookies: Mapping[str, str] = field(default_factory=dict)
    authorization: str | None = None


def parse_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    The prefix is case-insensitive. Anything that is not a Bearer header gives None.
    """
    if not authorization:
        return None
    if not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX) :].strip()
    return token or None


class CredentialResolver(ABC):
    """One strategy of the resolver chain."""

    name: str = "unknown"

    @abstractmethod
    async def resolve(self, credentials: Credentials) -> Identity | None:
        """Return the identity these credentials prove, or None."""
        pass


# Hey future me - an expired session is treated exactly like a missing one (None), we don't
# delete it here. Cleanup is SessionRepository.delete_expired's job, this path stays read-only.
class SessionCookieResolver(CredentialResolver):
    """Resolve the caller from the session cookie."""

    name = "session"

    def __init__(self, db: Database, cookie_name: str) -> None:
        self._db = db
        self._cookie_name = cookie_name

    async def resolve(self, credentials: Credentials) -> Identity | None:
        token = credentials.cookies.get(self._cookie_name)
        if not token:
            return None

        async with self._db.session_scope() as session:
            cookie_session = await SessionRepository(session).get(token)
            if cookie_session is None:
                logger.debug("Unknown session cookie")
                return None
            if cookie_session.is_expired():
                logger.debug("Session for user %s expired", cookie_session.user_id)
                return None
            user = await UserRepository(session).get_by_id(cookie_session.user_id)

        if user is None:
            return None
        return Identity(user_id=user.id, email=user.email, name=user.name, source=self.name)


# Listen up, ANY decode problem (expired, bad signature, wrong issuer/audience, garbage) is just
# "not authenticated by this strategy" - we log at DEBUG and return None. Never raise from here,
# otherwise a stale header would block a perfectly valid cookie further up the chain.
class BearerTokenResolver(CredentialResolver):
    """Resolve the caller from a signed JWT bearer token."""

    name = "bearer"

    def __init__(self, settings: AuthSettings) -> None:
        self._settings = settings

    async def resolve(self, credentials: Credentials) -> Identity | None:
        token = parse_bearer_token(credentials.authorization)
        if token is None:
            return None

        try:
            claims = jwt.decode(
                token,
                self._settings.jwt_secret,
                algorithms=[self._settings.jwt_algorithm],
                audience=self._settings.jwt_audience,
                issuer=self._settings.jwt_issuer,
            )
        except jwt.PyJWTError as e:
            logger.debug("Bearer token rejected: %s", e)
            return None

        user_id = claims.get("userId") or claims.get("sub")
        if not user_id:
            logger.debug("Bearer token carries no user id claim")
            return None
        return Identity(
            user_id=str(user_id),
            email=claims.get("email"),
            name=claims.get("name"),
            source=self.name,
        )


class IdentityResolver:
    """Run resolvers in order and return the first identity found."""

    def __init__(self, resolvers: Sequence[CredentialResolver]) -> None:
        self._resolvers = list(resolvers)

    async def resolve(self, credentials: Credentials) -> Identity | None:
        """First identity any resolver produces, or None."""
        for resolver in self._resolvers:
            identity = await resolver.resolve(credentials)
            if identity is not None:
                return identity
        return None

    async def require(self, credentials: Credentials) -> Identity:
        """Like resolve(), but anonymous callers raise AuthenticationError."""
        identity = await self.resolve(credentials)
        if identity is None:
            raise AuthenticationError()
        return identity


def build_identity_resolver(db: Database, settings: AuthSettings) -> IdentityResolver:
    """Default chain: session cookie first, then bearer token."""
    return IdentityResolver(
        [SessionCookieResolver(db, settings.session_cookie_name), BearerTokenResolver(settings)]
    )


def issue_access_token(user: User, settings: AuthSettings, now: datetime | None = None) -> str:
    """Sign a bearer token for ``user`` that BearerTokenResolver accepts."""
    issued_at = now or utc_now()
    payload = {
        "userId": user.id,
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=settings.token_ttl_seconds),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
