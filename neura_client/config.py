"""
Client Configuration
Loads settings from environment variables with validation
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Client settings loaded from environment variables.
    Uses pydantic-settings for validation and type coercion.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NEURA_",
        case_sensitive=False,
        extra="ignore"
    )

    # ============================================
    # Application Settings
    # ============================================
    app_name: str = "NeuraClient"
    app_version: str = "1.0.0"
    debug: bool = False

    # ============================================
    # Backend API
    # ============================================
    api_base_url: str = "http://localhost:8000"
    api_token: str = ""
    request_timeout_seconds: float = 30.0

    # ============================================
    # Cache Settings
    # ============================================
    settings_cache_ttl_seconds: float = 300.0

    # ============================================
    # Insight Generation Polling
    # ============================================
    poll_interval_seconds: float = 2.0
    poll_timeout_seconds: float = 60.0

    # ============================================
    # Insights List
    # ============================================
    insights_page_size: int = 10


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid loading .env file on every call.
    """
    return Settings()


# Export a default settings instance for convenience
settings = get_settings()
