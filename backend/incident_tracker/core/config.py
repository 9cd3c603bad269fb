"""
Application configuration module.

Provides centralized, environment-safe configuration management
with sensible defaults for local development.

All settings can be overridden via environment variables or a `.env`
file in the working directory.
"""

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Attributes:
        APP_NAME: Application name shown in docs and logs.
        APP_VERSION: Version reported by the root descriptor.
        ENVIRONMENT: Deployment environment. "production" hides internal
            error detail from responses.
        DEBUG: Enables interactive docs and SQL echo.
        HOST: Interface the development server binds to.
        PORT: Port the development server listens on.
        DATABASE_URL: SQLAlchemy connection string for the incident store.
        DB_AUTO_CREATE: Create missing tables on startup.
        LOG_LEVEL: Logging level.
        LOG_FORMAT: "json" or "console".
        CORS_ORIGINS: Comma-separated list of allowed origins.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application metadata
    APP_NAME: str = "Incident Management API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = Field(default=5000, ge=1, le=65535)

    # Database
    DATABASE_URL: str = "sqlite:///./incident_management.db"
    DB_AUTO_CREATE: bool = True
    DB_CONNECT_TIMEOUT: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"

    # CORS
    CORS_ORIGINS: str = "*"

    @property
    def cors_origins_list(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings instance.
    """
    settings = Settings()
    logger.debug("Settings loaded: app_name=%s, environment=%s", settings.APP_NAME, settings.ENVIRONMENT)
    return settings
