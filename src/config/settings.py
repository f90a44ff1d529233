"""
Configuration settings for the cinema admin client.
Uses Pydantic for validation and environment variable management.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    # Project info
    app_name: str = "cinema-admin-client"
    version: str = "0.1.0"
    debug: bool = Field(default=False, description="Debug mode")

    # Remote catalog API
    api_base_url: str = Field(
        default="http://localhost:4444", description="Catalog API base URL"
    )
    request_timeout: float = Field(
        default=10.0, gt=0, description="HTTP request timeout in seconds"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json or text)")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        # This allows API_BASE_URL to map to api_base_url
        env_prefix="",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use this function to get settings throughout the app.
    """
    return Settings()
