"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment (prefix ``MULTIGLOT_``)."""

    # ==========================================================================
    # Translation service
    # ==========================================================================

    # Takes precedence over a key saved in user settings
    anthropic_api_key: str = ""

    api_base_url: str = "https://api.anthropic.com"
    api_version: str = "2023-06-01"
    translation_model: str = "claude-sonnet-4-20250514"
    completion_model: str = "claude-haiku-4-5-20251001"
    validation_model: str = "claude-haiku-4-5-20251001"
    translation_max_tokens: int = 4096
    completion_max_tokens: int = 16
    request_timeout_seconds: float = 60.0

    # ==========================================================================
    # Resilience
    # ==========================================================================

    max_retries: int = 3
    initial_retry_delay_ms: int = 1000

    # ==========================================================================
    # Input handling
    # ==========================================================================

    debounce_ms: int = 500

    # ==========================================================================
    # Local state
    # ==========================================================================

    data_dir: str = "./data"
    log_level: str = "INFO"

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def messages_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/v1/messages"

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    class Config:
        env_prefix = "MULTIGLOT_"
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
