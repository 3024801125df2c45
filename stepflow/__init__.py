"""
stepflow - Declarative step/flow execution engine.

A flow is a directed graph of typed steps. Each step mutates a shared
execution context, branches conditionally, or calls out to a collaborator
(issue tracker, language model). A Session walks the graph one step at a
time until a terminal step or an error.

Usage:
    from stepflow import FlowManager, FileFlowStorage, Session, StepFactory

    manager = FlowManager(FileFlowStorage(".flows"), StepFactory())
    session = Session(manager.load_flow("hello"))
    session.run_sync()
"""

from .errors import (
    CollaboratorError,
    ConfigurationError,
    ExecutionError,
    FlowNotFoundError,
    FlowValidationError,
    StepflowError,
)
from .runtime.context import Context
from .runtime.flow import Flow
from .runtime.session import Session, SessionStatus
from .runtime.step_factory import StepFactory
from .spec.manager import FlowManager
from .spec.storage import FileFlowStorage, FlowStorage

__all__ = [
    "CollaboratorError",
    "ConfigurationError",
    "Context",
    "ExecutionError",
    "FileFlowStorage",
    "Flow",
    "FlowManager",
    "FlowNotFoundError",
    "FlowStorage",
    "FlowValidationError",
    "Session",
    "SessionStatus",
    "StepFactory",
    "StepflowError",
]
