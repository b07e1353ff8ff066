"""
Centralized Configuration System
Environment-aware settings for the metrics projection engine.
"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow"
    )
    """
    Production-grade configuration management.
    Loads from environment variables with sensible defaults.
    """

    # ============================================
    # BACKING STORE (Supabase / PostgREST)
    # ============================================
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # ============================================
    # FAN-OUT LIMITS
    # ============================================
    metrics_batch_size: int = Field(200, ge=1)       # IDs per `in` filter
    metrics_max_concurrency: int = Field(4, ge=1)    # Parallel chunk reads
    source_attribution_batch_size: int = Field(50, ge=1)
    date_range_page_size: int = Field(1000, ge=1)    # Rows per page of a date-range read (at most the server max-rows)

    # ============================================
    # OBSERVABILITY
    # ============================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    enable_structured_logging: bool = False  # Set to True for production JSON logs

    # ============================================
    # ENVIRONMENT
    # ============================================
    environment: Literal["development", "staging", "production"] = "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Singleton pattern for settings.
    Uses LRU cache to ensure only one Settings instance exists.
    """
    return Settings()
