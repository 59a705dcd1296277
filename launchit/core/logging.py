"""Logging setup for the service process."""
from __future__ import annotations

import logging.config

from launchit.core.config import settings


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once at startup."""

    logging.config.dictConfig(
        {
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
            "root": {
                "handlers": ["console"],
                "level": (level or settings.LOG_LEVEL).upper(),
            },
            "loggers": {
                "httpx": {"level": "WARNING"},
            },
        }
    )
