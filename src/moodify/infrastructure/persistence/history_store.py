"""SQL-backed recommendation history store."""

import logging

from moodify.domain.entities import RecommendationRecord
from moodify.domain.ports import IRecommendationHistoryStore

from .database import Database
from .repositories import RecommendationRepository, UserStatisticsRepository

logger = logging.getLogger(__name__)


# Yo, this opens its OWN session_scope on purpose - the snapshot insert and the counter bump
# commit together (or roll back together), and a failure here can never leak into whatever
# transaction the caller might be holding.
class SqlRecommendationHistoryStore(IRecommendationHistoryStore):
    """Archives a recommendation snapshot and bumps the owner's counter in one transaction."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def record(self, record: RecommendationRecord) -> None:
        """Persist the record and increment total_recommendations."""
        async with self._db.session_scope() as session:
            await RecommendationRepository(session).add(record)
            await UserStatisticsRepository(session).increment_recommendations(record.user_id)
        logger.debug(
            "Archived recommendation %s for user %s (%s)",
            record.id,
            record.user_id,
            record.emotion.value,
        )
