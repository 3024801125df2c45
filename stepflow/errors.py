"""
errors.py - Exception hierarchy for the flow engine.

Three families, matching where a failure originates:
- ConfigurationError: a flow declaration is malformed. Raised at load time;
  the Flow is never constructed.
- ExecutionError: a runtime precondition failed inside a step or session.
  Fatal to the owning Session only.
- CollaboratorError: an external system (storage, issue tracker, language
  model provider) failed. Never retried by the engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from stepflow.spec.validation import ValidationError


class StepflowError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context: Dict[str, Any] = dict(context or {})


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationError(StepflowError):
    """Raised when a flow or step declaration is malformed or incomplete."""

    pass


class FlowValidationError(ConfigurationError):
    """Raised when a flow definition fails validation.

    Carries every collected error so the operator sees all problems at once.
    """

    def __init__(self, flow_id: str, errors: Sequence["ValidationError"]):
        self.flow_id = flow_id
        self.errors: List["ValidationError"] = list(errors)
        error_msgs = "\n".join(f"  - {e}" for e in self.errors)
        label = f"Flow '{flow_id}'" if flow_id else "Flow"
        super().__init__(
            f"{label} validation failed:\n{error_msgs}",
            context={"flow_id": flow_id, "error_count": len(self.errors)},
        )


# =============================================================================
# Execution
# =============================================================================


class ExecutionError(StepflowError):
    """Raised when a runtime precondition is violated during execution."""

    def __init__(
        self,
        message: str,
        step_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context=context)
        self.step_id = step_id


class StepNotFoundError(ExecutionError):
    """Raised when a flow is asked to execute an id it does not contain."""

    def __init__(self, step_id: str, flow_id: str):
        self.flow_id = flow_id
        super().__init__(
            f"Step '{step_id}' not found in flow '{flow_id}'",
            step_id=step_id,
            context={"flow_id": flow_id},
        )


class SessionStateError(ExecutionError):
    """Raised when a session operation is called in the wrong state."""

    pass


class MaxStepsExceededError(ExecutionError):
    """Raised when a session exceeds its step budget (e.g. a routing cycle)."""

    def __init__(self, max_steps: int, step_id: Optional[str] = None):
        self.max_steps = max_steps
        super().__init__(
            f"Session exceeded the maximum of {max_steps} executed steps",
            step_id=step_id,
            context={"max_steps": max_steps},
        )


# =============================================================================
# Collaborators
# =============================================================================


class CollaboratorError(StepflowError):
    """Raised when an external collaborator fails (I/O, network, provider)."""

    pass


class FlowNotFoundError(CollaboratorError):
    """Raised when storage has no flow definition under the requested name."""

    def __init__(self, name: str, available: Optional[Sequence[str]] = None):
        self.name = name
        self.available: List[str] = list(available or [])
        msg = f"Flow '{name}' not found"
        if available is not None:
            msg += f". Available flows: {', '.join(self.available)}"
        super().__init__(msg, context={"name": name})


class StorageError(CollaboratorError):
    """Raised when flow storage fails for a reason other than not-found."""

    pass


class IssueNotFoundError(CollaboratorError):
    """Raised when the issue tracker reports that an issue does not exist."""

    pass


class InvalidIssueUrlError(CollaboratorError, ValueError):
    """Raised when an issue URL cannot be parsed into owner/repo/number."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Invalid GitHub issue URL: {url!r}", context={"url": url})


class GenerationCancelledError(CollaboratorError):
    """Raised by a language model provider when its cancellation event is set."""

    pass
