"""Persistence layer: SQLAlchemy models, repositories and the database session manager."""

from .database import Database
from .history_store import SqlRecommendationHistoryStore
from .models import Base
from .repositories import (
    EmotionAnalysisRepository,
    RecommendationRepository,
    SessionRepository,
    UserPreferencesRepository,
    UserRepository,
    UserStatisticsRepository,
)

__all__ = [
    "Base",
    "Database",
    "EmotionAnalysisRepository",
    "RecommendationRepository",
    "SessionRepository",
    "SqlRecommendationHistoryStore",
    "UserPreferencesRepository",
    "UserRepository",
    "UserStatisticsRepository",
]
