"""Logging configuration helpers for the quiz API."""

from __future__ import annotations

import logging
from logging import Logger

from app.core.config import settings


def configure_logging(level: str | None = None) -> Logger:
    """Configure root logging once and return the application logger."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL or "INFO").upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("app")
