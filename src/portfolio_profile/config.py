"""Configuration management for the portfolio profile service."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="",
    )

    # Backend
    api_url: str = Field(
        default="http://localhost:4000",
        description="Base URL of the portfolio backend (profile served at /api/profile)",
    )

    # Profile fetching
    profile_cache_ttl: float = Field(
        default=300.0, description="Profile cache TTL in seconds (default 5 min)"
    )
    profile_fetch_max_attempts: int = Field(
        default=3, description="Total attempts per profile fetch before giving up"
    )
    profile_retry_delay: float = Field(
        default=1.0, description="Fixed delay in seconds between fetch attempts"
    )
    profile_request_timeout: float = Field(
        default=10.0, description="Timeout in seconds for a single fetch attempt"
    )

    # Fallback dataset
    profile_fallback_enabled: bool = Field(
        default=True, description="Serve the fallback profile when the backend is unreachable"
    )
    profile_fallback_on_not_found: bool = Field(
        default=False,
        description="Treat a 404 from the backend as unavailable (database not seeded yet)",
    )
    profile_fallback_path: str | None = Field(
        default=None, description="Optional JSON file overriding the built-in fallback profile"
    )

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    # Logging Configuration
    log_to_file: bool = Field(default=False, description="Enable file-based logging")
    log_directory: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10485760,  # 10MB
        description="Max size per log file before rotation",
    )
    log_file_backup_count: int = Field(
        default=5, description="Number of rotated log files to keep"
    )
    log_file_prefix: str = Field(
        default="portfolio_profile", description="Prefix for log file names"
    )

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Validate the backend URL and strip trailing slashes."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"api_url must start with http:// or https://, got: {v}")
        return v.rstrip("/")

    @field_validator("profile_cache_ttl", "profile_request_timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate durations that must be strictly positive."""
        if v <= 0:
            raise ValueError(f"Value must be greater than 0, got: {v}")
        return v

    @field_validator("profile_retry_delay")
    @classmethod
    def validate_retry_delay(cls, v: float) -> float:
        """Validate the retry delay is not negative."""
        if v < 0:
            raise ValueError(f"profile_retry_delay must not be negative, got: {v}")
        return v

    @field_validator("profile_fetch_max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        """Validate at least one attempt is made."""
        if v < 1:
            raise ValueError(f"profile_fetch_max_attempts must be at least 1, got: {v}")
        return v

    @property
    def log_file_path(self) -> str:
        """Get the full log file path."""
        return f"{self.log_directory}/{self.log_file_prefix}.log"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
