from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PROJECTHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = "/api"
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])
    allowed_methods: list[str] = Field(
        default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allowed_headers: list[str] = Field(
        default_factory=lambda: ["Content-Type", "Authorization"]
    )
    firebase_config: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PROJECTHUB_FIREBASE_CONFIG", "FIREBASE_CONFIG"),
        description="Service account JSON for the Firebase Admin SDK",
    )
    firebase_web_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "PROJECTHUB_FIREBASE_WEB_API_KEY", "FIREBASE_WEB_API_KEY"
        ),
        description="Web API key used for Identity Toolkit password sign-in",
    )
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy async URL for the local document store",
    )
    token_secret: str = Field(
        default="your-secret-key-change-in-production",
        description="Signing secret for tokens issued by the local identity service",
    )
    token_ttl_seconds: int = Field(default=3600, gt=0)
    password_hash_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt cost factor for the local identity service",
    )
    login_verifies_password: bool = Field(
        default=True,
        description="Check the password with the identity service before issuing a token",
    )
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
