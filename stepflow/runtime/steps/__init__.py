"""Concrete step variants and the shared step contract."""

from .action import ActionStep
from .base import DEFAULT_ROUTE, NEXT_STEP_KEY, Step, resolve_next_step
from .decision import DecisionStep
from .log import LogStep
from .plan_generation import PlanGenerationStep
from .read_issue import ReadIssueStep

__all__ = [
    "ActionStep",
    "DEFAULT_ROUTE",
    "DecisionStep",
    "LogStep",
    "NEXT_STEP_KEY",
    "PlanGenerationStep",
    "ReadIssueStep",
    "Step",
    "resolve_next_step",
]
