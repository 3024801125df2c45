"""
plan_generation.py - PlanGenerationStep: ask a language model for a plan.

Reads the issue loaded by a preceding read-github-issue step, renders a
prompt, calls the injected provider, logs the plan and stores it in the
context under ``plan.generated``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from stepflow.providers.base import ChatMessage, GenerationRequest, LLMProvider
from stepflow.runtime.context import Context
from stepflow.spec.types import PlanGenerationStepConfig

from .base import Step
from .read_issue import ISSUE_BODY_KEY, ISSUE_NUMBER_KEY, ISSUE_TITLE_KEY

PLAN_CONTEXT_KEY = "plan.generated"

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000

DEFAULT_PROMPT_TEMPLATE = """Generate a detailed execution plan for the following GitHub issue:

Title: {title}
Description: {body}

Please provide a structured plan with:
1. Overview
2. Requirements Analysis
3. Implementation Steps
4. Success Criteria
5. Timeline

Format the response as markdown."""


class PlanGenerationStep(Step):
    """LLM call step; routes with the shared algorithm."""

    def __init__(
        self,
        config: PlanGenerationStepConfig,
        provider: LLMProvider,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(config.id, config.next_step_id, logger)
        self.config = config
        self.provider = provider

    def build_prompt(self, context: Context) -> str:
        title = str(context.get(ISSUE_TITLE_KEY) or "Unknown Issue")
        body = str(context.get(ISSUE_BODY_KEY) or "")

        template = self.config.prompt_template
        if not template:
            return DEFAULT_PROMPT_TEMPLATE.format(title=title, body=body)
        return (
            template
            .replace("{{" + ISSUE_TITLE_KEY + "}}", title)
            .replace("{{" + ISSUE_BODY_KEY + "}}", body)
        )

    def build_request(
        self, prompt: str, cancellation: Optional[asyncio.Event] = None
    ) -> GenerationRequest:
        temperature = self.config.temperature
        max_tokens = self.config.max_tokens
        return GenerationRequest(
            prompt=prompt,
            model=self.config.model or self.provider.default_model,
            temperature=DEFAULT_TEMPERATURE if temperature is None else temperature,
            max_tokens=DEFAULT_MAX_TOKENS if max_tokens is None else max_tokens,
            messages=[ChatMessage(role="user", content=prompt)],
            cancellation=cancellation,
        )

    async def execute(
        self,
        context: Context,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Optional[str]:
        self.logger.info("Executing PlanGenerationStep: %s", self.id)

        try:
            prompt = self.build_prompt(context)
            self.logger.info(
                "Generating plan for issue #%s: \"%s\"",
                context.get(ISSUE_NUMBER_KEY) or "",
                context.get(ISSUE_TITLE_KEY) or "Unknown Issue",
            )
            plan = await self.provider.generate(self.build_request(prompt, cancellation))
        except Exception as e:
            self.logger.error(
                "PlanGenerationStep failed (provider=%s): %s", self.provider.provider_name, e
            )
            raise

        self.logger.info("=== GENERATED PLAN ===")
        self.logger.info(plan)
        self.logger.info("=== END PLAN ===")
        context.set(PLAN_CONTEXT_KEY, plan)

        self.logger.info("Plan generation completed successfully")
        return self.resolve_next_step(context)
