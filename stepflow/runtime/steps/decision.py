"""
decision.py - DecisionStep: branch on one context value.

The outcome selects the literal routing label "true" or "false". A missing
context key is a warning, not an error, and counts as a false outcome.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional

from stepflow.errors import ExecutionError
from stepflow.logging_utils import with_metadata
from stepflow.runtime.context import Context
from stepflow.spec.types import DecisionCondition, DecisionStepConfig

from .base import Step

TRUE_ROUTE = "true"
FALSE_ROUTE = "false"


def _equals(value: str, expected: str) -> bool:
    return value == expected


def _contains(value: str, expected: str) -> bool:
    return expected in value


def _empty(value: str, expected: str) -> bool:
    return value == ""


CONDITION_TESTS: Dict[str, Callable[[str, str], bool]] = {
    DecisionCondition.EQUALS.value: _equals,
    DecisionCondition.NOT_EQUALS.value: lambda v, e: not _equals(v, e),
    DecisionCondition.CONTAINS.value: _contains,
    DecisionCondition.NOT_CONTAINS.value: lambda v, e: not _contains(v, e),
    DecisionCondition.EMPTY.value: _empty,
    DecisionCondition.NOT_EMPTY.value: lambda v, e: not _empty(v, e),
}


class DecisionStep(Step):
    """Conditional branch step."""

    def __init__(self, config: DecisionStepConfig, logger: Optional[logging.Logger] = None):
        super().__init__(config.id, config.next_step_id, logger)
        self.config = config

    async def execute(
        self,
        context: Context,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Optional[str]:
        self.logger.info("Executing DecisionStep with condition: %s", self.config.condition)

        result = self.evaluate(context)
        label = TRUE_ROUTE if result else FALSE_ROUTE

        self.logger.info(
            "Decision result: %s",
            label,
            extra=with_metadata({
                "step_id": self.id,
                "condition": self.config.condition,
                "contextKey": self.config.context_key,
                "trueValue": self.config.true_value,
                "falseValue": self.config.false_value,
            }),
        )

        if label not in self.routes:
            error = ExecutionError(
                f"No next step for condition result '{label}'",
                step_id=self.id,
                context={"condition": self.config.condition, "label": label},
            )
            self.logger.error("DecisionStep failed: %s", error)
            raise error

        return self.routes[label]

    def evaluate(self, context: Context) -> bool:
        """Evaluate the condition against the context without routing."""
        key = self.config.context_key
        if not context.has(key):
            self.logger.warning(
                "Decision context key '%s' not found; treating outcome as false", key
            )
            return False

        value = str(context.get(key))
        test = CONDITION_TESTS.get(self.config.condition)
        if test is None:
            self.logger.warning(
                "Unknown decision condition '%s'; falling back to equality",
                self.config.condition,
            )
            test = _equals

        result = test(value, self.config.true_value)
        self.logger.debug(
            "Condition evaluation: %r %s %r = %s",
            value,
            self.config.condition,
            self.config.true_value,
            result,
        )
        return result
