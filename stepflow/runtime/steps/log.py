"""
log.py - LogStep: emit a templated message at a configured level.

Placeholders use ``{{context.KEY}}``. Keys may contain word characters,
dots and dashes (so ``{{context.github.issue.title}}`` works). A missing or
non-primitive value renders as ``{{UNDEFINED:KEY}}``; interpolation never
raises.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Optional

from stepflow.logging_utils import with_metadata
from stepflow.runtime.context import Context
from stepflow.spec.types import LogLevel, LogStepConfig

from .base import Step

CONTEXT_PLACEHOLDER = re.compile(r"\{\{context\.([\w.\-]+)\}\}")

_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}


def format_context_value(value: Any) -> Optional[str]:
    """Render a primitive context value, or None if it is not primitive."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


class LogStep(Step):
    """Templated output step; routes with the shared algorithm."""

    def __init__(self, config: LogStepConfig, logger: Optional[logging.Logger] = None):
        super().__init__(config.id, config.next_step_id, logger)
        self.config = config

    @property
    def level(self) -> int:
        # Unknown levels fall back to info
        return _LEVELS.get(self.config.level, logging.INFO)

    async def execute(
        self,
        context: Context,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Optional[str]:
        message = self.interpolate(context)
        self.logger.log(self.level, message)

        self.logger.debug(
            "LogStep completed successfully",
            extra=with_metadata({
                "originalMessage": self.config.message,
                "interpolatedMessage": message,
                "level": self.config.level,
            }),
        )
        return self.resolve_next_step(context)

    def interpolate(self, context: Context) -> str:
        """Resolve ``{{context.KEY}}`` placeholders against ``context``."""

        def _replace(match: "re.Match[str]") -> str:
            key = match.group(1)
            rendered = format_context_value(context.get(key))
            if rendered is None:
                self.logger.warning("Context variable not found: %s", key)
                return f"{{{{UNDEFINED:{key}}}}}"
            return rendered

        return CONTEXT_PLACEHOLDER.sub(_replace, self.config.message)
