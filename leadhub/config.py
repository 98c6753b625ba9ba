from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Central configuration for the LeadHub backend.

    - Reads from .env (local) and process environment.
    - Ignores extra env vars so adding new ones doesn't break startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core app
    # -------------------------------------------------------------------------
    app_name: str = Field(default="LeadHub", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")
    environment: str = Field(default="local", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # -------------------------------------------------------------------------
    # Database
    # -------------------------------------------------------------------------
    database_url: str = Field(
        default="sqlite:///./leadhub.db",
        alias="DATABASE_URL",
    )

    # -------------------------------------------------------------------------
    # Console access
    # -------------------------------------------------------------------------
    # Shared secret checked by the session guard on /api routes.
    admin_api_secret: Optional[str] = Field(default=None, alias="ADMIN_API_SECRET")

    # CORS_ORIGINS=https://console.example.com,http://localhost:5173
    cors_origins_raw: Optional[str] = Field(default=None, alias="CORS_ORIGINS")

    @property
    def cors_origins(self) -> List[str]:
        """
        Returns a list of allowed origins from the comma-separated env string.
        Falls back to "*" when nothing is configured.
        """
        if not self.cors_origins_raw:
            return ["*"]
        return [
            origin.strip()
            for origin in self.cors_origins_raw.split(",")
            if origin.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader so config is evaluated once per process.
    """
    settings = Settings()
    logger.info(
        "Settings loaded (env=%s, debug=%s)",
        settings.environment,
        settings.debug,
    )
    return settings


# Singleton used everywhere else
settings: Settings = get_settings()
