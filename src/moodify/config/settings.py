"""Application settings loaded from environment variables and .env files."""

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    """Database connection settings."""

    # Hey future me - SQLite is the dev/test default, PostgreSQL (asyncpg) in production.
    # The pool_* knobs are only applied for PostgreSQL, see Database.__init__.
    url: str = "sqlite+aiosqlite:///./moodify.db"
    echo: bool = False
    pool_pre_ping: bool = True
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    create_tables: bool = Field(
        default=False,
        description="Create all tables on startup (dev/test only, use Alembic otherwise)",
    )


class SpotifySettings(BaseModel):
    """Spotify Web API credentials (client credentials flow)."""

    client_id: str = ""
    client_secret: str = ""
    market: str = "US"
    timeout: float = 30.0
    fallback_on_error: bool = Field(
        default=False,
        description="Serve a small built-in catalogue instead of failing when Spotify errors",
    )

    @property
    def is_configured(self) -> bool:
        """Check that both client credentials are present."""
        return bool(self.client_id.strip() and self.client_secret.strip())


class AuthSettings(BaseModel):
    """Bearer token and cookie session settings."""

    jwt_secret: str = "moodify-test-secret"  # nosec B105 - dev default, override in production
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "moodify-test"
    jwt_audience: str = "moodify-users"
    token_ttl_seconds: int = 3600
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    session_cookie_name: str = "moodify_session"
    session_max_age: int = 60 * 60 * 24 * 30
    cookie_secure: bool = False


class APISettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"  # nosec B104
    port: int = 8000


class ObservabilitySettings(BaseModel):
    """Logging settings."""

    log_level: str = "INFO"
    log_json_format: bool = False


class Settings(BaseSettings):
    """Root settings object.

    Nested sections are read from prefixed variables, e.g.
    ``DATABASE__URL`` or ``SPOTIFY__CLIENT_ID``.
    """

    app_name: str = "moodify"
    app_version: str = "1.0.0"
    environment: str = "development"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    api: APISettings = Field(default_factory=APISettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )


# Yo, cached on purpose - settings are read once per process. Tests that need different
# values build their own Settings(...) and hand it to create_app() instead of touching env.
@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
