"""
Configuration settings for the Random Users service.

Uses Pydantic Settings to load environment variables for the MongoDB
connection, the HTTP server, logging, and the default sizes handed to the
populate/read/delete operations.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    mongodb_uri: str = Field("mongodb://localhost:27017/random_users", alias="MONGODB_URI")
    mongodb_database: str = Field("random_users", alias="MONGODB_DATABASE")
    mongodb_collection: str = Field("users", alias="MONGODB_COLLECTION")
    mongodb_connect_timeout_ms: int = Field(5000, gt=0, alias="MONGODB_CONNECT_TIMEOUT_MS")

    # Application
    app_host: str = Field("0.0.0.0", alias="APP_HOST")
    app_port: int = Field(8003, alias="APP_PORT")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Population
    populate_total_records: int = Field(5_000_000, gt=0, alias="POPULATE_TOTAL_RECORDS")
    populate_batch_size: int = Field(10_000, gt=0, alias="POPULATE_BATCH_SIZE")
    populate_concurrency: int = Field(8, gt=0, alias="POPULATE_CONCURRENCY")
    email_max_attempts: int = Field(100, gt=0, alias="EMAIL_MAX_ATTEMPTS")
    faker_seed: Optional[int] = Field(None, alias="FAKER_SEED")
    faker_locale: str = Field("en_US", alias="FAKER_LOCALE")

    # Read-back and deletion
    page_size: int = Field(5000, gt=0, alias="PAGE_SIZE")
    delete_chunk_size: int = Field(100, gt=0, alias="DELETE_CHUNK_SIZE")
    delete_pause_seconds: float = Field(0.1, ge=0, alias="DELETE_PAUSE_SECONDS")

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


__all__ = ["Settings", "get_settings"]
