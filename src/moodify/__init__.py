"""Moodify - emotion-based music recommendation API."""

__version__ = "1.0.0"
