"""API response schemas."""

from moodify.api.schemas.responses import (
    AuthUserSchema,
    HistoryEntrySchema,
    ProfileSchema,
    TrackSchema,
)

__all__ = ["AuthUserSchema", "HistoryEntrySchema", "ProfileSchema", "TrackSchema"]
