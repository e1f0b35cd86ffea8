"""
Configuration settings for the user seed service.

Uses Pydantic Settings to load environment variables for the database
connection, pool sizing, logging, and the seed/reset operation defaults.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Number of users seeded when a caller does not say otherwise.
DEFAULT_SEED_TOTAL = 1_000_000


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("nest_user", alias="DB_USER")
    db_password: str = Field("nest_password", alias="DB_PASSWORD")
    db_name: str = Field("nest_db", alias="DB_NAME")
    db_synchronize: bool = Field(True, alias="DB_SYNCHRONIZE")
    db_pool_min_size: int = Field(1, ge=1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(10, ge=1, alias="DB_POOL_MAX_SIZE")
    db_pool_timeout_seconds: float = Field(30.0, gt=0, alias="DB_POOL_TIMEOUT_SECONDS")
    db_statement_timeout_ms: int = Field(0, ge=0, alias="DB_STATEMENT_TIMEOUT_MS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    api_host: str = Field("0.0.0.0", alias="API_HOST")
    api_port: int = Field(3000, alias="API_PORT")

    # Seeding
    seed_default_total: int = Field(DEFAULT_SEED_TOTAL, ge=0, alias="SEED_DEFAULT_TOTAL")
    seed_batch_size: int = Field(1_000, ge=1, alias="SEED_BATCH_SIZE")
    seed_concurrency: int = Field(4, ge=1, alias="SEED_CONCURRENCY")
    seed_random_seed: Optional[int] = Field(None, alias="SEED_RANDOM_SEED")
    seed_timeout_seconds: Optional[float] = Field(None, gt=0, alias="SEED_TIMEOUT_SECONDS")
    seed_log_every_batches: int = Field(100, ge=1, alias="SEED_LOG_EVERY_BATCHES")

    # Problems flag reset
    reset_max_attempts: int = Field(5, ge=1, alias="RESET_MAX_ATTEMPTS")
    reset_backoff_min_seconds: float = Field(0.05, ge=0, alias="RESET_BACKOFF_MIN_SECONDS")
    reset_backoff_max_seconds: float = Field(2.0, ge=0, alias="RESET_BACKOFF_MAX_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["DEFAULT_SEED_TOTAL", "Settings", "get_settings"]
