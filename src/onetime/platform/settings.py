from __future__ import annotations

"""Centralized configuration using pydantic-settings.

All configuration is loaded from environment variables and .env files.
This is the single source of truth for all platform configuration.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, RedisDsn, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default event limits, per rate limit window. Overridable per event with
# RATE_LIMIT__LIMITS='{"create_account": 5}'.
DEFAULT_EVENT_LIMITS: dict[str, int] = {
    "create_account": 10,
    "update_account": 10,
    "authenticate_session": 5,
    "failed_passphrase": 5,
    "homepage": 500,
    "dashboard": 1000,
    "create_secret": 250,
    "show_secret": 1000,
    "show_metadata": 1000,
    "burn_secret": 1000,
    "email_recipient": 50,
    "get_domain_brand": 1000,
    "update_domain_brand": 30,
    "api_call": 1000,
}


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Main application settings.

    All settings can be overridden via environment variables.
    For nested settings, use double underscore: REDIS__HOST=cache.internal
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ============================================================
    # Core Application Settings
    # ============================================================

    app_name: str = Field("onetime-platform", description="Application name")
    app_version: str = Field("0.1.0", description="Application version")
    environment: Environment = Field(Environment.DEVELOPMENT, description="Deployment environment")
    debug: bool = Field(False, description="Debug mode")
    testing: bool = Field(False, description="Testing mode")

    host: str = Field(
        "0.0.0.0", description="Server host"
    )  # nosec B104 - Production deployments use proxy
    port: int = Field(3000, description="Server port")

    secret_key: str = Field("change-me-in-production", description="Global site secret")

    # Customer ids promoted to the colonel (admin) role at signup
    colonels: list[str] = Field(default_factory=list, description="Admin customer ids")

    # ============================================================
    # Redis Configuration
    # ============================================================

    class RedisSettings(BaseModel):
        """Redis configuration."""

        url: RedisDsn | None = Field(None, description="Full Redis URL")
        host: str = Field("localhost", description="Redis host")
        port: int = Field(6379, description="Redis port")
        password: str = Field("", description="Redis password")
        db: int = Field(0, description="Redis database number")

        # Connection pool
        max_connections: int = Field(50, description="Max connections in pool")
        socket_timeout: int = Field(5, description="Socket timeout in seconds")
        decode_responses: bool = Field(True, description="Decode responses to strings")

        @property
        def redis_url(self) -> str:
            """Build Redis URL."""
            if self.url:
                return str(self.url)
            if self.password:
                return f"redis://:{self.password}@{self.host}:{self.port}/{self.db}"
            return f"redis://{self.host}:{self.port}/{self.db}"

    redis: RedisSettings = RedisSettings()  # type: ignore[call-arg]

    # ============================================================
    # Site Settings
    # ============================================================

    class SiteSettings(BaseModel):
        """Public site configuration."""

        host: str = Field("localhost:3000", description="Canonical site host")
        ssl: bool = Field(False, description="Site is served over https")
        autoverify: bool = Field(False, description="Mark new accounts verified on signup")
        domains_enabled: bool = Field(False, description="Enable custom domains")
        trust_forwarded_for: bool = Field(
            False, description="Take the client address from X-Forwarded-For (behind a proxy)"
        )

        default_secret_ttl: int = Field(7 * 24 * 3600, description="Default secret TTL")
        max_secret_ttl: int = Field(14 * 24 * 3600, description="Maximum secret TTL")
        metadata_ttl: int = Field(14 * 24 * 3600, description="Metadata record TTL")
        min_password_length: int = Field(6, description="Minimum account password length")

        @property
        def base_url(self) -> str:
            scheme = "https" if self.ssl else "http"
            return f"{scheme}://{self.host}"

    site: SiteSettings = SiteSettings()  # type: ignore[call-arg]

    # ============================================================
    # Observability
    # ============================================================

    class ObservabilitySettings(BaseModel):
        """Logging configuration."""

        log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
        log_format: str = Field("json", description="Log format (json or console)")

    observability: ObservabilitySettings = ObservabilitySettings()  # type: ignore[call-arg]

    # ============================================================
    # Rate Limiting
    # ============================================================

    class RateLimitSettings(BaseModel):
        """Rate limiting configuration."""

        enabled: bool = Field(True, description="Enable rate limiting")
        storage_url: str | None = Field(
            None, description="Counter storage; memory:// for in-process counters"
        )
        default_limit: int = Field(25, ge=1, description="Limit for unregistered events")
        window_seconds: int = Field(1200, ge=60, description="Window length and counter TTL")
        key_prefix: str = Field("limiter", description="Key prefix for storage")
        fail_open: bool = Field(
            False, description="Allow guarded actions when the counter store is unreachable"
        )

        # Per-event limits
        limits: dict[str, int] = Field(
            default_factory=lambda: dict(DEFAULT_EVENT_LIMITS),
            description="Per-event limits",
        )

        @property
        def uses_memory_store(self) -> bool:
            return (self.storage_url or "").startswith("memory://")

    rate_limit: RateLimitSettings = RateLimitSettings()  # type: ignore[call-arg]

    # ============================================================
    # Validation & Helpers
    # ============================================================

    @field_validator("environment", mode="before")
    def validate_environment(cls, v: Any) -> Any:
        """Validate environment."""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("secret_key")
    def validate_secret_key(cls, v: str, info: Any) -> str:
        """Validate secret key."""
        if (
            v == "change-me-in-production"
            and info.data.get("environment") == Environment.PRODUCTION
        ):
            raise ValueError("Secret key must be changed in production")
        return v

    @field_validator("colonels")
    def normalize_colonels(cls, v: list[str]) -> list[str]:
        return [custid.strip().lower() for custid in v if custid.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.testing or self.environment == Environment.TEST


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get global settings instance (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore
    return _settings


def reset_settings() -> None:
    """Reset settings (mainly for testing)."""
    global _settings
    _settings = None


# Convenience export
settings = get_settings()
