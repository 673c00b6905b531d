"""Application configuration and settings management.

This module defines the application settings loaded from environment
variables and provides a helper for accessing cached settings.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Attributes:
        DATABASE_URL: SQLAlchemy database connection string.
        SQL_ECHO: Echo emitted SQL through the engine logger.
        CREATE_TABLES: Create missing tables at startup (development only).
        PAGE_SIZE: Number of properties shown per view page.
        ALLOWED_ORIGINS: Allowed origins for CORS.
        LOG_LEVEL: Minimum level for structured logs.
        LOG_JSON: Render logs as JSON instead of console output.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="allow")

    DATABASE_URL: str = "sqlite:///./estate.db"
    SQL_ECHO: bool = False
    CREATE_TABLES: bool = True
    PAGE_SIZE: int = 20
    ALLOWED_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings.

    The settings object is cached to prevent reloading environment
    variables multiple times during application lifetime.
    """

    return Settings()
