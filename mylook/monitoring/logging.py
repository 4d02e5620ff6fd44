"""Logging configuration module."""

from __future__ import annotations

import logging
from typing import Any

from mylook.config.settings import get_settings


def configure_logging() -> None:
    """Configure root logger according to project conventions."""

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def log_failure(logger: logging.Logger, code: str, error: BaseException, **meta: Any) -> None:
    """Log a best-effort failure under a stable event code."""

    message = str(error) or error.__class__.__name__
    if meta:
        details = ", ".join(f"{key}={value}" for key, value in sorted(meta.items()))
        logger.warning("%s: %s (%s)", code, message, details)
    else:
        logger.warning("%s: %s", code, message)
