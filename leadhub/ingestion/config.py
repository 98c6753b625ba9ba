import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("leadhub.ingestion.config")


class IngestionSettings(BaseSettings):
    """Settings for the inbound webhooks.

    Environment variables (examples):

    INSTAGRAM_VERIFY_TOKEN="some-shared-secret"
    INGESTION_MAX_PAYLOAD_KB=512
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    instagram_verify_token: Optional[str] = Field(
        default=None,
        alias="INSTAGRAM_VERIFY_TOKEN",
    )
    max_payload_kb: int = Field(default=512, alias="INGESTION_MAX_PAYLOAD_KB")

    @field_validator("max_payload_kb", mode="before")
    @classmethod
    def validate_size(cls, v):
        val = int(v)
        if val <= 0:
            raise ValueError("INGESTION_MAX_PAYLOAD_KB must be > 0")
        return val

    @property
    def max_payload_bytes(self) -> int:
        return self.max_payload_kb * 1024


@lru_cache(maxsize=1)
def get_ingestion_settings() -> IngestionSettings:
    settings = IngestionSettings()
    if not settings.instagram_verify_token:
        logger.warning(
            "No Instagram verify token configured. Set INSTAGRAM_VERIFY_TOKEN to "
            "accept webhook subscription handshakes."
        )
    logger.info(
        "IngestionSettings loaded (max_payload_kb=%s)",
        settings.max_payload_kb,
    )
    return settings
