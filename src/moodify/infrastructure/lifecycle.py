"""Application lifespan: startup and shutdown of process-wide resources."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from sqlalchemy.engine import make_url

from moodify.config import Settings
from moodify.domain.exceptions import ConfigurationError
from moodify.domain.ports import IRecommendationProvider
from moodify.infrastructure.persistence import Database
from moodify.infrastructure.providers import SpotifyRecommendationProvider

logger = logging.getLogger(__name__)


# Hey future me, SQLite needs the PARENT directory of the db file to exist and be writable (it
# also creates -journal/-wal files next to it). We create the directory up front so a typo in
# DATABASE__URL fails at startup with a readable message instead of deep inside aiosqlite.
def ensure_sqlite_directory(settings: Settings) -> None:
    """Create the directory of a file-based SQLite database."""
    url = make_url(settings.database.url)
    if not url.drivername.startswith("sqlite"):
        return
    database = url.database
    if not database or database == ":memory:":
        return

    parent = Path(database).expanduser().parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create SQLite database directory '{parent}': {exc}. "
            "Update DATABASE__URL or adjust directory permissions."
        ) from exc


# Listen future me, everything before `yield` runs at STARTUP, everything after at SHUTDOWN.
# settings come from app.state (create_app puts them there) so tests can build an app against a
# temp database without touching env vars. A provider already on app.state (injected by a test
# or by create_app's caller) is used as-is and NOT closed here - whoever made it owns it.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the Database and the recommendation provider, dispose them on shutdown."""
    settings: Settings = app.state.settings
    logger.info(
        "Starting %s %s (%s)", settings.app_name, settings.app_version, settings.environment
    )

    ensure_sqlite_directory(settings)
    db = Database(settings)
    app.state.db = db
    logger.info("Database initialized (%s)", db.dialect)

    if settings.database.create_tables:
        await db.create_tables()
        logger.info("Database tables created")

    owns_provider = getattr(app.state, "recommendation_provider", None) is None
    if owns_provider:
        provider: IRecommendationProvider = SpotifyRecommendationProvider.from_settings(
            settings.spotify
        )
        app.state.recommendation_provider = provider
        if not settings.spotify.is_configured:
            logger.warning(
                "Spotify credentials missing - recommendation and search requests will fail"
            )

    try:
        yield
    finally:
        logger.info("Shutting down %s", settings.app_name)
        if owns_provider:
            await app.state.recommendation_provider.close()
            app.state.recommendation_provider = None
        await db.close()
