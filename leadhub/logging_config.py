from __future__ import annotations

import logging
import logging.config
from typing import Any, Dict, Optional

from leadhub.config import settings


def build_logging_config(level: str) -> Dict[str, Any]:
    """Console logging for the app and the uvicorn loggers it runs under."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            "leadhub": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": level, "handlers": ["console"], "propagate": False},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    }


def configure_logging(level: Optional[str] = None) -> None:
    """
    Apply the console logging config.

    Must run before uvicorn.run() so workers inherit it.
    """
    resolved = (level or settings.log_level or "INFO").upper()
    logging.config.dictConfig(build_logging_config(resolved))
    logging.getLogger("leadhub.logging_config").info(
        "Logging configured (level=%s)", resolved
    )
