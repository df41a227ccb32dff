"""
Application configuration loaded from environment variables.

All configuration is validated at startup to fail fast on misconfiguration.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation.
    
    All settings are loaded from environment variables with the same name.
    Use .env file for local development.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )
    
    # Database
    database_url: str = Field(
        default="sqlite:///./staffdb.db",
        description="SQLAlchemy connection URL (any dialect with a sync driver)"
    )
    echo_sql: bool = Field(
        default=False,
        description="Log every SQL statement emitted by the engine"
    )
    
    # Queries
    default_top_limit: int = Field(
        default=3,
        ge=1,
        le=100,
        description="Number of users returned by /users/oldest when no limit is given"
    )
    
    # Server
    debug: bool = Field(
        default=False,
        description="Enable debug mode with detailed error messages"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.
    
    Settings are loaded once at startup and cached for subsequent calls.
    """
    return Settings()
