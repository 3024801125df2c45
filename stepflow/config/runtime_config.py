"""Runtime configuration registry for the flow engine.

Provides centralized settings for flow storage, session limits, logging and
the GitHub client. Environment variables take precedence over YAML config.

Usage:
    from stepflow.config.runtime_config import get_flows_dir, get_max_steps

    flows_dir = get_flows_dir()  # Path(".flows") unless overridden
    cap = get_max_steps()        # 1000 unless overridden; 0 disables the cap

GitHub client settings:
    from stepflow.config.runtime_config import (
        get_github_api_url,
        get_github_timeout,
        get_github_token,
    )
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

_CONFIG_PATH = Path(__file__).parent / "runtime.yaml"
_cached_config: Optional[Dict[str, Any]] = None

ENV_FLOWS_DIR = "STEPFLOW_FLOWS_DIR"
ENV_MAX_STEPS = "STEPFLOW_MAX_STEPS"
ENV_LOG_LEVEL = "STEPFLOW_LOG_LEVEL"
ENV_GITHUB_API_URL = "STEPFLOW_GITHUB_API_URL"
ENV_GITHUB_TIMEOUT = "STEPFLOW_GITHUB_TIMEOUT"

# Checked in order; first non-empty wins
GITHUB_TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _load_config() -> Dict[str, Any]:
    """Load runtime.yaml configuration, with caching."""
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH, encoding="utf-8") as f:
            _cached_config = yaml.safe_load(f) or _default_config()
    else:
        _cached_config = _default_config()

    return _cached_config


def _default_config() -> Dict[str, Any]:
    """Return default configuration if runtime.yaml doesn't exist."""
    return {
        "version": "1.0",
        "flows": {
            "directory": ".flows",
        },
        "session": {
            "max_steps": 1000,
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        },
        "github": {
            "api_url": "https://api.github.com",
            "timeout_seconds": 30,
        },
    }


def reset_config() -> None:
    """Reset cached config (for testing)."""
    global _cached_config
    _cached_config = None


def _section(name: str) -> Dict[str, Any]:
    config = _load_config()
    section = config.get(name)
    if isinstance(section, dict):
        return section
    return _default_config()[name]


def _int_setting(env_var: str, section: str, key: str, minimum: int = 0) -> int:
    """Resolve an integer setting: env var, then config file, then default.

    Invalid environment values are logged and ignored.
    """
    env_value = os.environ.get(env_var)
    if env_value:
        try:
            parsed = int(env_value)
            if parsed >= minimum:
                return parsed
        except ValueError:
            pass
        logger.warning(
            "Invalid %s value '%s' (expected integer >= %d). Using configured value.",
            env_var,
            env_value,
            minimum,
        )

    value = _section(section).get(key)
    if isinstance(value, int) and value >= minimum:
        return value
    return _default_config()[section][key]


# =============================================================================
# Flows
# =============================================================================


def get_flows_dir() -> Path:
    """Get the directory flow definitions are read from.

    Precedence:
    1. STEPFLOW_FLOWS_DIR
    2. flows.directory in runtime.yaml
    3. Default: ".flows" (relative to the working directory)
    """
    env_value = os.environ.get(ENV_FLOWS_DIR)
    if env_value:
        return Path(env_value)
    return Path(_section("flows").get("directory") or ".flows")


# =============================================================================
# Session
# =============================================================================


def get_max_steps() -> int:
    """Get the per-session executed-step cap (0 means unlimited)."""
    return _int_setting(ENV_MAX_STEPS, "session", "max_steps")


# =============================================================================
# Logging
# =============================================================================


def get_log_level() -> str:
    """Get the configured log level name.

    Returns "INFO" and logs a warning if an invalid level is configured.
    """
    value = os.environ.get(ENV_LOG_LEVEL) or _section("logging").get("level") or "INFO"
    level = str(value).upper()
    if level == "WARN":
        level = "WARNING"
    if level not in VALID_LOG_LEVELS:
        logger.warning(
            "Invalid log level '%s' (valid: %s). Falling back to 'INFO'.",
            value,
            ", ".join(VALID_LOG_LEVELS),
        )
        return "INFO"
    return level


def get_log_format() -> str:
    """Get the log record format string."""
    return _section("logging").get("format") or _default_config()["logging"]["format"]


# =============================================================================
# GitHub
# =============================================================================


def get_github_api_url() -> str:
    """Get the GitHub REST API base URL (no trailing slash)."""
    value = os.environ.get(ENV_GITHUB_API_URL) or _section("github").get("api_url")
    return str(value or "https://api.github.com").rstrip("/")


def get_github_timeout() -> int:
    """Get the GitHub request timeout in seconds."""
    return _int_setting(ENV_GITHUB_TIMEOUT, "github", "timeout_seconds", minimum=1)


def get_github_token() -> Optional[str]:
    """Get a GitHub token from the environment, if one is set."""
    for env_var in GITHUB_TOKEN_ENV_VARS:
        value = os.environ.get(env_var)
        if value:
            return value
    return None
