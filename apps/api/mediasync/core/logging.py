"""Logging setup and helpers for safe structured logging fields."""

from __future__ import annotations

import hashlib
import logging
from typing import Any

_ROOT_LOGGER_NAME = "mediasync"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stream handler to the package logger once and apply ``level``."""
    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    logger.setLevel(level.upper())
    if not any(getattr(handler, "_mediasync", False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._mediasync = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"
