"""FastAPI dependency providers."""

import json
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from moodify.application.services.auth_service import AuthService
from moodify.application.services.emotion_service import EmotionService
from moodify.application.services.history_service import HistoryService
from moodify.application.services.identity_resolver import (
    Credentials,
    IdentityResolver,
    build_identity_resolver,
)
from moodify.application.services.profile_service import ProfileService
from moodify.application.services.recommendation_service import RecommendationService
from moodify.config import Settings
from moodify.domain.entities import Identity
from moodify.domain.exceptions import ValidationError
from moodify.domain.ports import IRecommendationHistoryStore, IRecommendationProvider
from moodify.infrastructure.persistence.database import Database
from moodify.infrastructure.persistence.history_store import SqlRecommendationHistoryStore


# Hey future me - everything process-wide (Database, Settings, provider) lives on app.state and
# is created in the lifespan. Dependencies only READ it, they never construct long-lived
# objects, so tests can swap any of them with app.dependency_overrides.
def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    settings: Settings = request.app.state.settings
    return settings


def get_database(request: Request) -> Database:
    """The process-wide Database."""
    db: Database = request.app.state.db
    return db


async def get_db_session(
    db: Database = Depends(get_database),
) -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session, committed when the request finishes cleanly."""
    async with db.session_scope() as session:
        yield session


def get_recommendation_provider(request: Request) -> IRecommendationProvider:
    """The process-wide recommendation provider."""
    provider: IRecommendationProvider = request.app.state.recommendation_provider
    return provider


def get_history_store(db: Database = Depends(get_database)) -> IRecommendationHistoryStore:
    """History store writing through its own unit of work."""
    return SqlRecommendationHistoryStore(db)


def get_credentials(request: Request) -> Credentials:
    """Cookies and Authorization header of the current request."""
    return Credentials(
        cookies=dict(request.cookies),
        authorization=request.headers.get("Authorization"),
    )


def get_identity_resolver(
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
) -> IdentityResolver:
    """Session cookie → bearer token resolver chain."""
    return build_identity_resolver(db, settings.auth)


# Yo, this is THE auth gate. Any route that depends on it answers 401 {"message": "Unauthorized"}
# for anonymous callers before its body (and body validation) ever runs.
async def get_identity(
    credentials: Credentials = Depends(get_credentials),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Identity:
    """Resolved caller identity, AuthenticationError when there is none."""
    return await resolver.require(credentials)


async def read_json_body(request: Request) -> Any:
    """Decode the request body, malformed JSON counts as a validation failure.

    Routes read bodies through this (not a pydantic body parameter) so every
    bad body yields the same ``{"message", "errors"}`` 400 shape.
    """
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(errors=[{"field": "", "message": "Malformed JSON body"}]) from e


def get_recommendation_service(
    provider: IRecommendationProvider = Depends(get_recommendation_provider),
    history_store: IRecommendationHistoryStore = Depends(get_history_store),
) -> RecommendationService:
    return RecommendationService(provider, history_store)


def get_auth_service(
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    return AuthService(session, settings.auth)


def get_emotion_service(db: Database = Depends(get_database)) -> EmotionService:
    return EmotionService(db)


def get_history_service(session: AsyncSession = Depends(get_db_session)) -> HistoryService:
    return HistoryService(session)


def get_profile_service(session: AsyncSession = Depends(get_db_session)) -> ProfileService:
    return ProfileService(session)
