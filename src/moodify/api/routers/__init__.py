"""API routers, all mounted under /api."""

from fastapi import APIRouter

from moodify.api.routers import (
    auth,
    emotions,
    health,
    history,
    profile,
    recommendations,
    search,
)

api_router = APIRouter(prefix="/api")
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(recommendations.router)
api_router.include_router(search.router)
api_router.include_router(emotions.router)
api_router.include_router(history.router)
api_router.include_router(profile.router)

__all__ = ["api_router"]
