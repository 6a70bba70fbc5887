"""Configuration module for Moodify."""

from .settings import (
    APISettings,
    AuthSettings,
    DatabaseSettings,
    ObservabilitySettings,
    Settings,
    SpotifySettings,
    get_settings,
)

__all__ = [
    "APISettings",
    "AuthSettings",
    "DatabaseSettings",
    "ObservabilitySettings",
    "Settings",
    "SpotifySettings",
    "get_settings",
]
