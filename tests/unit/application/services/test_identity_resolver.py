"""Tests for the caller identity resolver chain."""

from datetime import timedelta

import jwt
import pytest

from moodify.application.services.identity_resolver import (
    BearerTokenResolver,
    Credentials,
    IdentityResolver,
    SessionCookieResolver,
    build_identity_resolver,
    issue_access_token,
    parse_bearer_token,
)
from moodify.config import AuthSettings, Settings
from moodify.domain.entities import CookieSession, User, utc_now
from moodify.domain.exceptions import AuthenticationError
from moodify.infrastructure.persistence import Database, SessionRepository


@pytest.fixture
def auth_settings(settings: Settings) -> AuthSettings:
    return settings.auth


async def _store_session(db: Database, user: User, expires_in: timedelta) -> str:
    token = f"cookie-{user.id}-{expires_in.total_seconds()}"
    async with db.session_scope() as session:
        await SessionRepository(session).create(
            CookieSession(session_token=token, user_id=user.id, expires=utc_now() + expires_in)
        )
    return token


class TestParseBearerToken:
    """Authorization header parsing."""

    @pytest.mark.parametrize("header", ["Bearer abc.def", "bearer abc.def", "BEARER abc.def"])
    def test_prefix_is_case_insensitive(self, header: str) -> None:
        assert parse_bearer_token(header) == "abc.def"

    @pytest.mark.parametrize("header", [None, "", "Basic dXNlcjpwYXNz", "Bearer ", "Token abc"])
    def test_non_bearer_headers_give_none(self, header: str | None) -> None:
        assert parse_bearer_token(header) is None


class TestBearerTokenResolver:
    """JWT bearer strategy."""

    async def test_valid_token_resolves_user(self, auth_settings: AuthSettings) -> None:
        account = User(email="a@example.com", name="A")
        token = issue_access_token(account, auth_settings)

        identity = await BearerTokenResolver(auth_settings).resolve(
            Credentials(authorization=f"Bearer {token}")
        )

        assert identity is not None
        assert identity.user_id == account.id
        assert identity.email == "a@example.com"
        assert identity.source == "bearer"

    async def test_expired_token_gives_none(self, auth_settings: AuthSettings) -> None:
        account = User(email="a@example.com")
        issued = utc_now() - timedelta(seconds=auth_settings.token_ttl_seconds + 60)
        token = issue_access_token(account, auth_settings, now=issued)
        identity = await BearerTokenResolver(auth_settings).resolve(
            Credentials(authorization=f"Bearer {token}")
        )
        assert identity is None

    async def test_wrong_signature_gives_none(self, auth_settings: AuthSettings) -> None:
        account = User(email="a@example.com")
        forged = auth_settings.model_copy(
            update={"jwt_secret": "someone-elses-signing-secret-0123456789abcdef"}
        )
        token = issue_access_token(account, forged)
        identity = await BearerTokenResolver(auth_settings).resolve(
            Credentials(authorization=f"Bearer {token}")
        )
        assert identity is None

    async def test_wrong_audience_gives_none(self, auth_settings: AuthSettings) -> None:
        account = User(email="a@example.com")
        other = auth_settings.model_copy(update={"jwt_audience": "somebody-else"})
        token = issue_access_token(account, other)
        identity = await BearerTokenResolver(auth_settings).resolve(
            Credentials(authorization=f"Bearer {token}")
        )
        assert identity is None

    async def test_garbage_token_gives_none(self, auth_settings: AuthSettings) -> None:
        identity = await BearerTokenResolver(auth_settings).resolve(
            Credentials(authorization="Bearer not-a-jwt")
        )
        assert identity is None

    async def test_sub_claim_is_accepted_without_user_id(
        self, auth_settings: AuthSettings
    ) -> None:
        now = utc_now()
        token = jwt.encode(
            {
                "sub": "user-from-sub",
                "iat": now,
                "exp": now + timedelta(minutes=5),
                "iss": auth_settings.jwt_issuer,
                "aud": auth_settings.jwt_audience,
            },
            auth_settings.jwt_secret,
            algorithm=auth_settings.jwt_algorithm,
        )
        identity = await BearerTokenResolver(auth_settings).resolve(
            Credentials(authorization=f"bearer {token}")
        )
        assert identity is not None
        assert identity.user_id == "user-from-sub"


class TestSessionCookieResolver:
    """Session cookie strategy."""

    async def test_live_session_resolves_user(
        self, db: Database, user: User, auth_settings: AuthSettings
    ) -> None:
        token = await _store_session(db, user, timedelta(hours=1))
        resolver = SessionCookieResolver(db, auth_settings.session_cookie_name)

        identity = await resolver.resolve(
            Credentials(cookies={auth_settings.session_cookie_name: token})
        )

        assert identity is not None
        assert identity.user_id == user.id
        assert identity.email == user.email
        assert identity.source == "session"

    async def test_expired_session_gives_none(
        self, db: Database, user: User, auth_settings: AuthSettings
    ) -> None:
        token = await _store_session(db, user, timedelta(hours=-1))
        resolver = SessionCookieResolver(db, auth_settings.session_cookie_name)

        identity = await resolver.resolve(
            Credentials(cookies={auth_settings.session_cookie_name: token})
        )
        assert identity is None

    async def test_unknown_cookie_gives_none(
        self, db: Database, auth_settings: AuthSettings
    ) -> None:
        resolver = SessionCookieResolver(db, auth_settings.session_cookie_name)
        identity = await resolver.resolve(
            Credentials(cookies={auth_settings.session_cookie_name: "nope"})
        )
        assert identity is None


class TestIdentityResolverChain:
    """Ordering and the require() gate."""

    async def test_session_wins_over_bearer(
        self, db: Database, user: User, auth_settings: AuthSettings
    ) -> None:
        token = await _store_session(db, user, timedelta(hours=1))
        someone_else = issue_access_token(User(email="b@example.com"), auth_settings)
        resolver = build_identity_resolver(db, auth_settings)

        identity = await resolver.resolve(
            Credentials(
                cookies={auth_settings.session_cookie_name: token},
                authorization=f"Bearer {someone_else}",
            )
        )
        assert identity is not None
        assert identity.user_id == user.id

    async def test_stale_cookie_falls_through_to_bearer(
        self, db: Database, user: User, auth_settings: AuthSettings
    ) -> None:
        token = await _store_session(db, user, timedelta(hours=-1))
        bearer_user = User(email="b@example.com")
        bearer = issue_access_token(bearer_user, auth_settings)
        resolver = build_identity_resolver(db, auth_settings)

        identity = await resolver.resolve(
            Credentials(
                cookies={auth_settings.session_cookie_name: token},
                authorization=f"Bearer {bearer}",
            )
        )
        assert identity is not None
        assert identity.user_id == bearer_user.id

    async def test_require_raises_for_anonymous_callers(self) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            await IdentityResolver([]).require(Credentials())
        assert exc_info.value.message == "Unauthorized"
