"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

Sub-configs are composed onto AppSettings by a model validator so that
each group can also be instantiated (and tested) on its own.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "gobin"
    documents_collection: str = "documents"

    # Version rows older than this are removed by the cleanup task; 0 = keep forever
    expire_after_seconds: int = 0
    cleanup_interval_seconds: int = 600


class TokenSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_secret: str = Field(default="", repr=False)
    jwt_issuer: str = "gobin"
    jwt_algorithm: str = "HS256"

    # None = tokens never expire (only the signature is checked)
    token_ttl_seconds: Optional[int] = None


class RateLimitSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    rate_limit_requests: int = 0
    rate_limit_duration_seconds: int = 0
    # "memory://" keeps buckets in-process; "redis://host:6379" shares them.
    # The limiter always opens the "async+" variant of the URI.
    rate_limit_storage_uri: str = "memory://"

    @property
    def enabled(self) -> bool:
        return self.rate_limit_requests > 0 and self.rate_limit_duration_seconds > 0


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "gobin"
    build_version: str = "dev"
    debug: bool = False

    # Maximum document size in characters; 0 = unlimited
    max_document_size: int = 0

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    tokens: Optional[TokenSettings] = None
    rate_limit: Optional[RateLimitSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.tokens is None:
            self.tokens = TokenSettings()
        if self.rate_limit is None:
            self.rate_limit = RateLimitSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    def safe_summary(self) -> dict:
        """Settings suitable for a startup log line, secrets left out."""
        return {
            "env": self.env,
            "build_version": self.build_version,
            "db_name": self.db.db_name,
            "max_document_size": self.max_document_size,
            "expire_after_seconds": self.db.expire_after_seconds,
            "rate_limit_enabled": self.rate_limit.enabled,
            "rate_limit_requests": self.rate_limit.rate_limit_requests,
            "rate_limit_duration_seconds": self.rate_limit.rate_limit_duration_seconds,
            "signing_configured": bool(self.tokens.jwt_secret),
            "token_ttl_seconds": self.tokens.token_ttl_seconds,
        }
