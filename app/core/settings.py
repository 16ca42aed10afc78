"""Application settings using Pydantic Settings for typed configuration.

This module centralizes all configuration and provides type-safe access to settings.
Settings are loaded from environment variables with sensible defaults.
"""

from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    env_name: str = Field(default="development", alias="ENV_NAME")

    # Database
    database_url: str = Field(alias="DATABASE_URL")

    # Admin panel
    session_secret_key: str = Field(alias="SESSION_SECRET_KEY")

    # CORS
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    # Tokens (access and refresh are signed with independent secrets)
    access_token_secret: str = Field(alias="ACCESS_TOKEN_SECRET")
    refresh_token_secret: str = Field(alias="REFRESH_TOKEN_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expires_minutes: int = Field(
        default=15, alias="ACCESS_TOKEN_EXPIRES_MINUTES", ge=1
    )
    refresh_token_expires_days: int = Field(
        default=7, alias="REFRESH_TOKEN_EXPIRES_DAYS", ge=1, le=90
    )
    refresh_token_rotation: bool = Field(default=False, alias="REFRESH_TOKEN_ROTATION")

    # Passwords
    bcrypt_rounds: int = Field(default=12, alias="BCRYPT_ROUNDS", ge=4, le=31)

    # Uploads
    upload_dir: Path = Field(default=Path("public/uploads"), alias="UPLOAD_DIR")
    upload_url_prefix: str = Field(default="/uploads", alias="UPLOAD_URL_PREFIX")

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @computed_field
    @property
    def access_token_expires_in(self) -> timedelta:
        """Get access token lifetime as timedelta."""
        return timedelta(minutes=self.access_token_expires_minutes)

    @computed_field
    @property
    def refresh_token_expires_in(self) -> timedelta:
        """Get refresh token lifetime as timedelta."""
        return timedelta(days=self.refresh_token_expires_days)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
