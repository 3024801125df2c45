"""
step_factory.py - Build concrete steps from validated declarations.

Collaborators are injected into the factory and handed to the steps that
need them:
- logger: every step
- issue tracker client: read-github-issue
- LLM providers, selected by the step's ``llm_provider`` name: plan-generation

Dispatch is exhaustive over StepType. Adding a StepType member without a
builder fails at import time.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from stepflow.errors import ConfigurationError
from stepflow.integrations.github import GitHubClient, IssueTrackerClient
from stepflow.logging_utils import get_step_logger
from stepflow.providers.base import LLMProvider
from stepflow.spec.types import (
    ActionStepConfig,
    DecisionStepConfig,
    LogStepConfig,
    PlanGenerationStepConfig,
    ReadIssueStepConfig,
    StepConfig,
    StepType,
    step_config_from_dict,
)

from .steps import (
    ActionStep,
    DecisionStep,
    LogStep,
    PlanGenerationStep,
    ReadIssueStep,
    Step,
)

logger = logging.getLogger(__name__)

StepDeclaration = Union[StepConfig, Mapping[str, Any]]

# StepType -> StepFactory method name
_BUILDERS: Dict[StepType, str] = {
    StepType.ACTION: "_build_action",
    StepType.DECISION: "_build_decision",
    StepType.LOG: "_build_log",
    StepType.READ_GITHUB_ISSUE: "_build_read_issue",
    StepType.PLAN_GENERATION: "_build_plan_generation",
}

_missing = [t.value for t in StepType if t not in _BUILDERS]
if _missing:
    raise RuntimeError(f"StepFactory has no builder for step types: {', '.join(_missing)}")


class StepFactory:
    """Creates Step instances from step declarations.

    Args:
        providers: LLM providers keyed by name ("openai", "claude", "gemini").
        issue_client: Issue tracker client. A GitHubClient is created on first
            use if none is given.
        logger: Logger handed to every step.

    Example:
        >>> factory = StepFactory(providers=build_stub_providers())
        >>> step = factory.create_step({"id": "hi", "type": "log", "message": "Hi", "nextStepId": {}})
    """

    def __init__(
        self,
        providers: Optional[Mapping[str, LLMProvider]] = None,
        issue_client: Optional[IssueTrackerClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._providers: Dict[str, LLMProvider] = {
            name.lower(): provider for name, provider in (providers or {}).items()
        }
        self._issue_client = issue_client
        self._logger = logger or get_step_logger()

    @property
    def issue_client(self) -> IssueTrackerClient:
        if self._issue_client is None:
            self._issue_client = GitHubClient()
        return self._issue_client

    def get_provider(self, name: str) -> LLMProvider:
        """Resolve an LLM provider by name (case-insensitive).

        Raises:
            ConfigurationError: If no provider is registered under ``name``.
        """
        provider = self._providers.get(name.lower())
        if provider is None:
            registered = ", ".join(sorted(self._providers)) or "none"
            raise ConfigurationError(
                f"No LLM provider registered for '{name}'. Registered: {registered}",
                context={"llm_provider": name},
            )
        return provider

    def create_step(self, declaration: StepDeclaration) -> Step:
        """Create a step from a typed config or a validated raw mapping.

        Raises:
            ConfigurationError: If the step type is unknown (the message
                carries the full payload) or a collaborator is missing.
        """
        if isinstance(declaration, Mapping):
            config = step_config_from_dict(declaration)
        else:
            config = declaration

        step_type = getattr(config, "step_type", None)
        if step_type not in _BUILDERS:
            raise ConfigurationError(
                f"Unknown step type: {config!r}",
                context={"step_id": getattr(config, "id", None)},
            )

        step = getattr(self, _BUILDERS[step_type])(config)
        logger.debug("Created %s for step '%s'", type(step).__name__, step.id)
        return step

    def create_steps(self, declarations: Iterable[StepDeclaration]) -> List[Step]:
        return [self.create_step(d) for d in declarations]

    # -------------------------------------------------------------------------
    # Builders
    # -------------------------------------------------------------------------

    def _build_action(self, config: ActionStepConfig) -> Step:
        return ActionStep(config, logger=self._logger)

    def _build_decision(self, config: DecisionStepConfig) -> Step:
        return DecisionStep(config, logger=self._logger)

    def _build_log(self, config: LogStepConfig) -> Step:
        return LogStep(config, logger=self._logger)

    def _build_read_issue(self, config: ReadIssueStepConfig) -> Step:
        return ReadIssueStep(config, client=self.issue_client, logger=self._logger)

    def _build_plan_generation(self, config: PlanGenerationStepConfig) -> Step:
        return PlanGenerationStep(
            config,
            provider=self.get_provider(config.llm_provider),
            logger=self._logger,
        )
