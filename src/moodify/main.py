"""FastAPI application factory and entrypoint."""

import logging

import uvicorn
from fastapi import FastAPI

from moodify import __version__
from moodify.api.exception_handlers import register_exception_handlers
from moodify.api.routers import api_router
from moodify.config import Settings, get_settings
from moodify.domain.ports import IRecommendationProvider
from moodify.infrastructure.lifecycle import lifespan
from moodify.infrastructure.observability import RequestLoggingMiddleware, configure_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    recommendation_provider: IRecommendationProvider | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use, defaults to the cached environment settings
        recommendation_provider: Provider to use instead of building the Spotify one
    """
    settings = settings or get_settings()

    configure_logging(
        log_level=settings.observability.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )

    app = FastAPI(
        title="Moodify API",
        description="Emotion-based music recommendations",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.recommendation_provider = recommendation_provider

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)
    app.include_router(api_router)

    return app


def run() -> None:
    """Run the API with uvicorn (``moodify`` console script)."""
    settings = get_settings()
    uvicorn.run(
        "moodify.main:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
