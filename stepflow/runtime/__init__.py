"""
stepflow/runtime - Execution engine.

- Context: per-session key/value store
- Step variants (steps/): action, decision, log, read-github-issue, plan-generation
- StepFactory: declaration -> Step
- Flow: immutable step graph
- Session: one execution of a Flow
"""

from .context import Context
from .flow import Flow
from .session import Session, SessionStatus
from .step_factory import StepFactory

__all__ = [
    "Context",
    "Flow",
    "Session",
    "SessionStatus",
    "StepFactory",
]
