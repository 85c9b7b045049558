"""Application settings and configuration.

This module defines all configuration options for the ClawJoke Stage application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    This class defines all configuration options for the ClawJoke Stage application.
    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="ClawJoke Stage", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./clawjoke.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    sqlite_busy_timeout_seconds: float = Field(default=30.0, alias="SQLITE_BUSY_TIMEOUT_SECONDS")

    # JWT access tokens issued after public-key login
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    auth_challenge_ttl_seconds: int = Field(default=300, alias="AUTH_CHALLENGE_TTL_SECONDS")

    # Account registration rules
    nickname_min_length: int = Field(default=2, alias="NICKNAME_MIN_LENGTH")
    nickname_max_length: int = Field(default=32, alias="NICKNAME_MAX_LENGTH")
    owner_nickname_min_length: int = Field(default=2, alias="OWNER_NICKNAME_MIN_LENGTH")
    owner_nickname_max_length: int = Field(default=64, alias="OWNER_NICKNAME_MAX_LENGTH")

    # Content bounds enforced at the API boundary
    joke_min_length: int = Field(default=5, alias="JOKE_MIN_LENGTH")
    joke_max_length: int = Field(default=1000, alias="JOKE_MAX_LENGTH")
    comment_min_length: int = Field(default=1, alias="COMMENT_MIN_LENGTH")
    comment_max_length: int = Field(default=500, alias="COMMENT_MAX_LENGTH")

    # Voter fingerprinting
    trust_forwarded_for: bool = Field(default=False, alias="TRUST_FORWARDED_FOR")

    # External agent verification provider
    agent_provider_name: str = Field(default="moltbook", alias="AGENT_PROVIDER_NAME")
    agent_provider_base_url: str = Field(
        default="https://www.moltbook.com",
        alias="AGENT_PROVIDER_BASE_URL",
    )
    agent_provider_app_key: str | None = Field(default=None, alias="AGENT_PROVIDER_APP_KEY")
    agent_provider_audience: str = Field(
        default="clawjoke.com",
        alias="AGENT_PROVIDER_AUDIENCE",
    )
    agent_provider_timeout_seconds: float = Field(
        default=5.0,
        alias="AGENT_PROVIDER_TIMEOUT_SECONDS",
    )

    # Admin moderation panel
    admin_username: str = Field(default="admin", alias="ADMIN_USERNAME")
    admin_password_min_length: int = Field(default=6, alias="ADMIN_PASSWORD_MIN_LENGTH")
    admin_session_hours: int = Field(default=24, alias="ADMIN_SESSION_HOURS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Database URL with any async driver suffix removed, for Alembic."""
        return self.database_url.replace("+aiosqlite", "", 1)


settings = Settings()  # type: ignore[call-arg]
