"""
types.py - Dataclasses for declarative flow definitions.

These types are the typed form of a flow file after validation. Each step
variant has its own frozen config dataclass; the ``StepType`` enum is the
discriminant the factory dispatches on.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union

from stepflow.errors import ConfigurationError


class StepType(Enum):
    """Closed set of step variants."""
    ACTION = "action"
    DECISION = "decision"
    LOG = "log"
    READ_GITHUB_ISSUE = "read-github-issue"
    PLAN_GENERATION = "plan-generation"


class ActionOperation(Enum):
    SET_CONTEXT = "setContext"
    UPDATE_CONTEXT = "updateContext"
    REMOVE_CONTEXT = "removeContext"


class DecisionCondition(Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    EMPTY = "empty"
    NOT_EMPTY = "not_empty"


class LogLevel(Enum):
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class LLMProviderName(Enum):
    OPENAI = "openai"
    CLAUDE = "claude"
    GEMINI = "gemini"


# Operations that need a value to write
VALUE_REQUIRED_OPERATIONS = frozenset({
    ActionOperation.SET_CONTEXT.value,
    ActionOperation.UPDATE_CONTEXT.value,
})


def normalize_step_type(raw: Any) -> Any:
    """Normalize a declared step type for case-insensitive matching.

    "Read_GitHub_Issue " -> "read-github-issue". Non-strings pass through so
    that validation can report them.
    """
    if not isinstance(raw, str):
        return raw
    return raw.strip().lower().replace("_", "-")


def parse_step_type(data: Mapping[str, Any]) -> StepType:
    """Resolve the StepType of a raw step declaration.

    Raises:
        ConfigurationError: If the type is missing or unrecognized. The message
            includes the full offending payload.
    """
    normalized = normalize_step_type(data.get("type"))
    try:
        return StepType(normalized)
    except ValueError:
        raise ConfigurationError(
            f"Unknown step type: {_dump_payload(data)}",
            context={"step_id": data.get("id"), "type": data.get("type")},
        ) from None


def _dump_payload(data: Any) -> str:
    try:
        return json.dumps(data, sort_keys=True, default=str)
    except (TypeError, ValueError):
        return repr(data)


# =============================================================================
# Step Configs
# =============================================================================


@dataclass(frozen=True)
class ActionStepConfig:
    """Context mutation: set, update or remove one key."""
    step_type: ClassVar[StepType] = StepType.ACTION

    id: str
    operation: str
    key: str
    value: Optional[str] = None
    next_step_id: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DecisionStepConfig:
    """Conditional branch on one context value.

    Routing table is keyed by the literal labels "true" / "false".
    """
    step_type: ClassVar[StepType] = StepType.DECISION

    id: str
    condition: str
    context_key: str
    true_value: str = ""
    false_value: str = ""
    next_step_id: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LogStepConfig:
    """Templated log output. ``message`` may embed {{context.KEY}}."""
    step_type: ClassVar[StepType] = StepType.LOG

    id: str
    message: str
    level: str = LogLevel.INFO.value
    next_step_id: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ReadIssueStepConfig:
    """Fetch a GitHub issue (and optionally its comments) into the context."""
    step_type: ClassVar[StepType] = StepType.READ_GITHUB_ISSUE

    id: str
    issue_url: str
    include_comments: bool = True
    github_token: Optional[str] = None
    next_step_id: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PlanGenerationStepConfig:
    """Ask a language model for an execution plan for the loaded issue."""
    step_type: ClassVar[StepType] = StepType.PLAN_GENERATION

    id: str
    llm_provider: str
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    prompt_template: Optional[str] = None
    next_step_id: Dict[str, str] = field(default_factory=dict)


StepConfig = Union[
    ActionStepConfig,
    DecisionStepConfig,
    LogStepConfig,
    ReadIssueStepConfig,
    PlanGenerationStepConfig,
]


# =============================================================================
# Flow Definition
# =============================================================================


@dataclass(frozen=True)
class FlowDefinition:
    """Complete declarative flow: metadata plus ordered step configs."""
    id: str
    steps: Tuple[StepConfig, ...] = ()
    name: Optional[str] = None
    description: Optional[str] = None
    initial_step_id: Optional[str] = None

    @property
    def step_ids(self) -> Tuple[str, ...]:
        return tuple(step.id for step in self.steps)


# =============================================================================
# Parsing
# =============================================================================


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _routes(data: Mapping[str, Any]) -> Dict[str, str]:
    return {str(label): str(target) for label, target in (data.get("nextStepId") or {}).items()}


def _action_from_dict(data: Mapping[str, Any]) -> ActionStepConfig:
    return ActionStepConfig(
        id=data["id"],
        operation=data["operation"],
        key=data["key"],
        value=_optional_str(data.get("value")),
        next_step_id=_routes(data),
    )


def _decision_from_dict(data: Mapping[str, Any]) -> DecisionStepConfig:
    return DecisionStepConfig(
        id=data["id"],
        condition=data["condition"],
        context_key=data["contextKey"],
        true_value=_optional_str(data.get("trueValue")) or "",
        false_value=_optional_str(data.get("falseValue")) or "",
        next_step_id=_routes(data),
    )


def _log_from_dict(data: Mapping[str, Any]) -> LogStepConfig:
    return LogStepConfig(
        id=data["id"],
        message=data["message"],
        level=data.get("level", LogLevel.INFO.value),
        next_step_id=_routes(data),
    )


def _read_issue_from_dict(data: Mapping[str, Any]) -> ReadIssueStepConfig:
    include_comments = data.get("includeComments")
    return ReadIssueStepConfig(
        id=data["id"],
        issue_url=data["issueUrl"],
        include_comments=True if include_comments is None else bool(include_comments),
        github_token=data.get("github_token"),
        next_step_id=_routes(data),
    )


def _plan_generation_from_dict(data: Mapping[str, Any]) -> PlanGenerationStepConfig:
    return PlanGenerationStepConfig(
        id=data["id"],
        llm_provider=data["llm_provider"],
        model=data.get("model"),
        temperature=data.get("temperature"),
        max_tokens=data.get("max_tokens"),
        prompt_template=data.get("prompt_template"),
        next_step_id=_routes(data),
    )


_STEP_PARSERS = {
    StepType.ACTION: _action_from_dict,
    StepType.DECISION: _decision_from_dict,
    StepType.LOG: _log_from_dict,
    StepType.READ_GITHUB_ISSUE: _read_issue_from_dict,
    StepType.PLAN_GENERATION: _plan_generation_from_dict,
}


def step_config_from_dict(data: Mapping[str, Any]) -> StepConfig:
    """Parse one step declaration into its typed config.

    Expects structurally valid data (see stepflow.spec.validation).

    Raises:
        ConfigurationError: If the step type is unknown.
    """
    step_type = parse_step_type(data)
    return _STEP_PARSERS[step_type](data)


def flow_definition_from_dict(data: Mapping[str, Any]) -> FlowDefinition:
    """Parse a FlowDefinition from a dictionary (e.g., JSON/YAML load)."""
    return FlowDefinition(
        id=data["id"],
        steps=tuple(step_config_from_dict(step) for step in data.get("steps", [])),
        name=data.get("name"),
        description=data.get("description"),
        initial_step_id=data.get("initialStepId") or None,
    )
