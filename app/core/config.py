"""
Configuration management for the Site Attendance Sync Agent
"""
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # CORS settings
    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for local only."
    )

    # Version (can be git SHA or semver)
    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    # Offline punch queue (synchronous key-value storage)
    OFFLINE_QUEUE_DATABASE_URL: str = Field(
        default="sqlite:///./offline_queue.db",
        description="SQLAlchemy URL of the key-value store backing the offline punch queue"
    )
    OFFLINE_QUEUE_KEY: str = Field(
        default="attendance_offline_queue",
        description="Key of the slot holding the JSON-encoded punch queue"
    )
    OFFLINE_QUEUE_MAX_SIZE: int = Field(
        default=500,
        description="Maximum number of queued punches; new punches are rejected once reached"
    )

    # Worker image cache (asynchronous transactional storage)
    IMAGE_CACHE_DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./worker_image_cache.db",
        description="Async SQLAlchemy URL of the worker photo cache"
    )
    IMAGE_CACHE_TTL_DAYS: int = Field(default=25, description="Freshness window for cached worker photos")
    IMAGE_CACHE_OPEN_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Upper bound on how long opening the image cache may take"
    )

    # Remote attendance API and connectivity
    ATTENDANCE_API_URL: str = Field(
        default="http://localhost:3000",
        description="Base URL of the attendance API that queued punches are pushed to"
    )
    ATTENDANCE_API_TIMEOUT_SECONDS: float = Field(default=15.0, description="Timeout for attendance API calls")
    CONNECTIVITY_CHECK_URL: str = Field(
        default="http://localhost:3000/",
        description="URL probed to decide whether the device is online"
    )
    CONNECTIVITY_TIMEOUT_SECONDS: float = Field(default=3.0, description="Timeout for the connectivity probe")
    FORCE_OFFLINE: bool = Field(default=False, description="Treat the device as offline regardless of the probe")

    # Drain retry policy
    SYNC_RETRIES: int = Field(default=3, description="Re-attempts per punch during a drain")
    SYNC_RETRY_DELAY_SECONDS: float = Field(default=1.0, description="Initial delay between re-attempts")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    @field_validator("OFFLINE_QUEUE_MAX_SIZE", "IMAGE_CACHE_TTL_DAYS")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("SYNC_RETRIES")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("SYNC_RETRIES cannot be negative")
        return v

    def validate_production(self) -> None:
        """
        Validate settings for production environment

        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            # ALLOWED_ORIGINS must not be wildcard in production
            if self.ALLOWED_ORIGINS == "*" or not self.ALLOWED_ORIGINS:
                raise ValueError(
                    "ALLOWED_ORIGINS must be explicitly set (not '*') in production environment"
                )

    def get_allowed_origins_list(self) -> List[str]:
        """
        Get list of allowed CORS origins

        Returns:
            List of allowed origins (or ['*'] for local)
        """
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def image_cache_ttl_ms(self) -> int:
        """Freshness window in epoch milliseconds"""
        return self.IMAGE_CACHE_TTL_DAYS * 24 * 60 * 60 * 1000


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
