"""
logging_utils.py - Logging setup for the flow engine.

Steps emit through an injected ``logging.Logger``. Structured metadata rides
along in ``extra={"metadata": {...}}`` so handlers can render or ship it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from stepflow.config.runtime_config import get_log_format, get_log_level

STEP_LOGGER_NAME = "stepflow.steps"


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure root logging from runtime config.

    Args:
        level: Optional level name override (e.g. "DEBUG").
        fmt: Optional format string override.
    """
    logging.basicConfig(
        level=(level or get_log_level()).upper(),
        format=fmt or get_log_format(),
    )


def get_step_logger() -> logging.Logger:
    """Default logger handed to steps by the factory."""
    return logging.getLogger(STEP_LOGGER_NAME)


def with_metadata(metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build the ``extra`` mapping that carries structured metadata."""
    return {"metadata": dict(metadata or {})}
