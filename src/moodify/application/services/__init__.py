"""Application services."""

from moodify.application.services.auth_service import AuthService, LoginResult
from moodify.application.services.emotion_service import EmotionService
from moodify.application.services.history_service import (
    HistoryAnalytics,
    HistoryPage,
    HistoryService,
)
from moodify.application.services.identity_resolver import (
    BearerTokenResolver,
    CredentialResolver,
    Credentials,
    IdentityResolver,
    SessionCookieResolver,
    build_identity_resolver,
    issue_access_token,
)
from moodify.application.services.profile_service import Profile, ProfileService
from moodify.application.services.recommendation_service import (
    RecommendationResult,
    RecommendationService,
)

__all__ = [
    "AuthService",
    "BearerTokenResolver",
    "CredentialResolver",
    "Credentials",
    "EmotionService",
    "HistoryAnalytics",
    "HistoryPage",
    "HistoryService",
    "IdentityResolver",
    "LoginResult",
    "Profile",
    "ProfileService",
    "RecommendationResult",
    "RecommendationService",
    "SessionCookieResolver",
    "build_identity_resolver",
    "issue_access_token",
]
