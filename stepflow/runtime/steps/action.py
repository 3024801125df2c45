"""
action.py - ActionStep: set, update or remove one context key.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from stepflow.errors import ExecutionError
from stepflow.logging_utils import with_metadata
from stepflow.runtime.context import Context
from stepflow.spec.types import ActionOperation, ActionStepConfig

from .base import Step


class ActionStep(Step):
    """Context mutation step.

    - setContext: requires a value.
    - updateContext: requires the key to exist, then a value.
    - removeContext: warns and no-ops if the key is absent.

    Routes with the shared algorithm after mutating.
    """

    def __init__(self, config: ActionStepConfig, logger: Optional[logging.Logger] = None):
        super().__init__(config.id, config.next_step_id, logger)
        self.config = config

    async def execute(
        self,
        context: Context,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Optional[str]:
        operation = self.config.operation
        key = self.config.key
        self.logger.info("Executing ActionStep: %s on key '%s'", operation, key)

        try:
            if operation == ActionOperation.SET_CONTEXT.value:
                self._set_context(context)
            elif operation == ActionOperation.UPDATE_CONTEXT.value:
                self._update_context(context)
            elif operation == ActionOperation.REMOVE_CONTEXT.value:
                self._remove_context(context)
            else:
                raise ExecutionError(f"Unknown operation: {operation}", step_id=self.id)
        except ExecutionError as e:
            self.logger.error(
                "ActionStep failed: %s",
                e,
                extra=with_metadata({"step_id": self.id, "operation": operation, "key": key}),
            )
            raise

        self.logger.debug(
            "ActionStep completed successfully",
            extra=with_metadata({"operation": operation, "key": key, "value": self.config.value}),
        )
        return self.resolve_next_step(context)

    def _require_value(self) -> str:
        value = self.config.value
        if value is None or value == "":
            raise ExecutionError(
                f"Value is required for {self.config.operation} operation",
                step_id=self.id,
            )
        return value

    def _set_context(self, context: Context) -> None:
        value = self._require_value()
        context.set(self.config.key, value)
        self.logger.debug("Set context: %s = %s", self.config.key, value)

    def _update_context(self, context: Context) -> None:
        if not context.has(self.config.key):
            raise ExecutionError(
                f"Cannot update non-existent context key: {self.config.key}",
                step_id=self.id,
            )
        value = self._require_value()
        context.set(self.config.key, value)
        self.logger.debug("Updated context: %s = %s", self.config.key, value)

    def _remove_context(self, context: Context) -> None:
        if not context.has(self.config.key):
            self.logger.warning(
                "Attempting to remove non-existent context key: %s", self.config.key
            )
            return
        context.delete(self.config.key)
        self.logger.debug("Removed context key: %s", self.config.key)
