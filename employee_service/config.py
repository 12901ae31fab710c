"""Configuration for Employee Service."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Employee service configuration.

    All settings can be overridden via environment variables.
    """

    # Service configuration
    SERVICE_NAME: str = Field(default="employee-service")
    SERVICE_HOST: str = Field(default="0.0.0.0")
    SERVICE_PORT: int = Field(default=8080, ge=1, le=65535)
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )

    # MongoDB
    MONGODB_URI: str = Field(default="mongodb://localhost:27017")
    MONGODB_DATABASE: str = Field(default="employees_db")
    MONGODB_MAX_POOL_SIZE: int = Field(default=100, ge=1)
    MONGODB_MIN_POOL_SIZE: int = Field(default=0, ge=0)
    MONGODB_MAX_IDLE_TIME_MS: int = Field(default=60000, ge=0)
    MONGODB_CONNECT_TIMEOUT_MS: int = Field(default=10000, ge=0)
    MONGODB_SOCKET_TIMEOUT_MS: int = Field(default=0, ge=0)
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = Field(default=5000, ge=0)

    # Cache (empty REDIS_URL keeps everything in process memory)
    REDIS_URL: str = Field(default="")
    CACHE_PREFIX: str = Field(default="employee-service:cache:")
    CACHE_TTL_SECONDS: int = Field(default=300, ge=1)
    CACHE_MAX_SIZE: int = Field(default=1000, ge=1)

    # JWT Authentication
    JWT_SECRET_KEY: str = Field(
        default="your-super-secret-key-change-in-production-min-32-chars"
    )
    JWT_ALGORITHM: str = Field(default="HS256")

    # Retry
    RETRY_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    RETRY_WAIT_MIN_SECONDS: float = Field(default=0.1, ge=0)
    RETRY_WAIT_MAX_SECONDS: float = Field(default=2.0, ge=0)

    # Circuit breaker
    CIRCUIT_BREAKER_FAILURE_RATE_THRESHOLD: float = Field(default=50.0, gt=0, le=100)
    CIRCUIT_BREAKER_SLIDING_WINDOW_SIZE: int = Field(default=100, ge=1)
    CIRCUIT_BREAKER_MINIMUM_CALLS: int = Field(default=10, ge=1)
    CIRCUIT_BREAKER_RECOVERY_TIMEOUT: int = Field(default=60, ge=0)
    CIRCUIT_BREAKER_HALF_OPEN_MAX_CALLS: int = Field(default=3, ge=1)

    # Rate limiter
    RATE_LIMIT_MAX_REQUESTS: int = Field(default=100, ge=1)
    RATE_LIMIT_WINDOW_SECONDS: int = Field(default=1, ge=1)

    # Bulkhead
    BULKHEAD_MAX_CONCURRENT_CALLS: int = Field(default=25, ge=1)
    BULKHEAD_MAX_WAIT_SECONDS: float = Field(default=0.5, ge=0)

    # CORS
    CORS_ORIGINS: str = Field(default="http://localhost:8080,http://localhost:3000")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()
