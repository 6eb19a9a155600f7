"""Application configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = "order-sync-service"
    app_env: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # API Settings
    # -------------------------------------------------------------------------
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 4
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3001", "http://localhost:3002"]
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # -------------------------------------------------------------------------
    # Shopify Admin API
    # -------------------------------------------------------------------------
    shopify_store_url: str = ""
    shopify_access_token: str = ""
    shopify_api_version: str = "2024-01"
    shopify_api_timeout: int = 30

    # -------------------------------------------------------------------------
    # PostgreSQL Document Store
    # -------------------------------------------------------------------------
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "orders"
    postgres_password: str = ""
    postgres_db: str = "order_sync"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_recycle: int = 1800

    def _postgres_dsn(self, scheme: str) -> str:
        return (
            f"{scheme}://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def database_url(self) -> str:
        """Async URL used by the API, the worker and scripts."""
        return self._postgres_dsn("postgresql+asyncpg")

    @property
    def database_url_sync(self) -> str:
        """Blocking URL used by Alembic migrations."""
        return self._postgres_dsn("postgresql")

    # -------------------------------------------------------------------------
    # Redis
    # -------------------------------------------------------------------------
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0

    @property
    def redis_url(self) -> str:
        """Construct Redis connection URL."""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # -------------------------------------------------------------------------
    # Celery
    # -------------------------------------------------------------------------
    celery_broker_url: str = ""
    celery_result_backend: str = ""

    @property
    def celery_broker(self) -> str:
        """Get Celery broker URL, defaulting to Redis URL."""
        return self.celery_broker_url or self.redis_url

    @property
    def celery_backend(self) -> str:
        """Get Celery result backend URL, defaulting to Redis URL."""
        return self.celery_result_backend or self.redis_url

    # -------------------------------------------------------------------------
    # Sync Engine Settings
    # -------------------------------------------------------------------------
    sync_page_size: int = Field(default=50, ge=1, le=250)
    sync_commit_batch_size: int = Field(default=100, ge=1, le=500)
    sync_page_delay_seconds: float = Field(default=1.0, ge=0.0)
    sync_flush_each_page: bool = True
    sync_bounded_limit: int = Field(default=50, ge=1, le=250)
    sync_orders_interval_minutes: int = Field(default=30, ge=1, le=59)

    # -------------------------------------------------------------------------
    # Worker Settings
    # -------------------------------------------------------------------------
    # Hour (UTC) of the nightly full sync; unset disables it
    sync_full_schedule_hour: int | None = Field(default=None, ge=0, le=23)
    # Hard limit for the bounded sync task only; full syncs run until done
    bounded_sync_time_limit_seconds: int = Field(default=600, ge=60)

    # -------------------------------------------------------------------------
    # Store Retry Settings
    # -------------------------------------------------------------------------
    store_retry_attempts: int = Field(default=3, ge=1)
    store_retry_delay_seconds: float = Field(default=1.0, ge=0.0)
    store_operation_timeout_seconds: float = Field(default=10.0, gt=0.0)

    # Time allowed for in-flight background syncs on shutdown
    shutdown_grace_seconds: float = 30.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
