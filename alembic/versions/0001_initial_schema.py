"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 12:00:00.000000

Hey future me - every table below `users` hangs off it with ON DELETE CASCADE.
Deleting the user row removes sessions, analyses, recommendations, preferences
and statistics in the same statement. Application code never deletes children
by hand! (SQLite only enforces this with PRAGMA foreign_keys=ON, Database sets it.)

user_statistics.user_id is UNIQUE - it is the conflict target of the atomic
INSERT ... ON CONFLICT (user_id) DO UPDATE counter bump.
"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

EMOTION_CHECK = (
    "emotion IN ('happy', 'sad', 'angry', 'surprised', 'neutral', 'fear', 'disgust')"
)


def _user_fk() -> sa.ForeignKey:
    return sa.ForeignKey("users.id", ondelete="CASCADE")


def upgrade() -> None:
    """Create all Moodify tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("email_verified", sa.DateTime(timezone=True), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "sessions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("session_token", sa.String(255), nullable=False),
        sa.Column("user_id", sa.String(36), _user_fk(), nullable=False),
        sa.Column("expires", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_sessions_session_token", "sessions", ["session_token"], unique=True)
    op.create_index("ix_sessions_user_id", "sessions", ["user_id"])

    op.create_table(
        "emotion_analyses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), _user_fk(), nullable=False),
        sa.Column("emotion", sa.String(50), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(EMOTION_CHECK, name="ck_emotion_analyses_emotion"),
        sa.CheckConstraint(
            "confidence >= 0 AND confidence <= 1", name="ck_emotion_analyses_confidence"
        ),
    )
    op.create_index("ix_emotion_analyses_user_id", "emotion_analyses", ["user_id"])
    op.create_index("ix_emotion_analyses_emotion", "emotion_analyses", ["emotion"])
    op.create_index("ix_emotion_analyses_created_at", "emotion_analyses", ["created_at"])
    op.create_index(
        "ix_emotion_analyses_user_emotion", "emotion_analyses", ["user_id", "emotion"]
    )

    op.create_table(
        "music_recommendations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), _user_fk(), nullable=False),
        sa.Column(
            "emotion_analysis_id",
            sa.String(36),
            sa.ForeignKey("emotion_analyses.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("emotion", sa.String(50), nullable=False),
        sa.Column("track_id", sa.String(255), nullable=False),
        sa.Column("track_name", sa.String(500), nullable=False),
        sa.Column("artist_name", sa.String(500), nullable=False),
        sa.Column("album_name", sa.String(500), nullable=True),
        sa.Column("track_url", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("popularity", sa.Integer(), nullable=True),
        sa.Column("audio_features", sa.JSON(), nullable=True),
        sa.Column("was_played", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("user_rating", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "popularity IS NULL OR (popularity >= 0 AND popularity <= 100)",
            name="ck_music_recommendations_popularity",
        ),
        sa.CheckConstraint(
            "user_rating IS NULL OR (user_rating >= 1 AND user_rating <= 5)",
            name="ck_music_recommendations_user_rating",
        ),
    )
    op.create_index("ix_music_recommendations_user_id", "music_recommendations", ["user_id"])
    op.create_index("ix_music_recommendations_emotion", "music_recommendations", ["emotion"])
    op.create_index(
        "ix_music_recommendations_track_id", "music_recommendations", ["track_id"]
    )
    op.create_index(
        "ix_music_recommendations_created_at", "music_recommendations", ["created_at"]
    )

    op.create_table(
        "user_preferences",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), _user_fk(), nullable=False, unique=True),
        sa.Column("bio", sa.String(200), nullable=True),
        sa.Column("preferred_genres", sa.JSON(), nullable=True),
        sa.Column(
            "explicit_content_allowed", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "user_statistics",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), _user_fk(), nullable=False, unique=True),
        sa.Column("total_analyses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_recommendations", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("most_common_emotion", sa.String(50), nullable=True),
        sa.Column("last_activity", sa.DateTime(timezone=True), nullable=True),
        sa.Column("calculated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    """Drop all Moodify tables (children first)."""
    op.drop_table("user_statistics")
    op.drop_table("user_preferences")
    op.drop_table("music_recommendations")
    op.drop_table("emotion_analyses")
    op.drop_table("sessions")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
