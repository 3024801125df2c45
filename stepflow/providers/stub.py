"""
stub.py - Stub language model provider.

Zero-cost, deterministic provider for tests, CI and offline runs. It never
calls a network API; the response is derived from the request so tests can
assert on it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Dict, List, Optional

from stepflow.errors import GenerationCancelledError
from stepflow.spec.types import LLMProviderName

from .base import (
    GenerationRequest,
    LLMProvider,
    StreamEvent,
    StreamEventType,
    TokenUsage,
)

logger = logging.getLogger(__name__)

_DEFAULT_MODELS = {
    LLMProviderName.OPENAI.value: "gpt-3.5-turbo",
    LLMProviderName.CLAUDE.value: "claude-3-5-sonnet-latest",
    LLMProviderName.GEMINI.value: "gemini-1.5-flash",
}


class StubProvider(LLMProvider):
    """Deterministic provider.

    Args:
        name: Provider name to report.
        response: Fixed response text. If None, a "[STUB] ..." line echoing
            the model and prompt size is returned.
        model: Default model name.
    """

    def __init__(
        self,
        name: str = "stub",
        response: Optional[str] = None,
        model: Optional[str] = None,
    ):
        self._name = name
        self._response = response
        self._model = model or _DEFAULT_MODELS.get(name, "stub-model")
        self.requests: List[GenerationRequest] = []

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def default_model(self) -> str:
        return self._model

    def _render(self, request: GenerationRequest) -> str:
        if self._response is not None:
            return self._response
        return (
            f"[STUB {self._name}] plan from {request.model} "
            f"for a {len(request.prompt)}-char prompt"
        )

    async def generate(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        self.check_cancelled(request)
        # Yield once so callers observe a real suspension point
        await asyncio.sleep(0)
        self.check_cancelled(request)
        logger.debug("StubProvider(%s) generated response for model %s", self._name, request.model)
        return self._render(request)

    async def stream(self, request: GenerationRequest) -> AsyncIterator[StreamEvent]:
        self.requests.append(request)
        text = self._render(request)
        words = text.split(" ")
        for index, word in enumerate(words):
            if request.cancelled:
                yield StreamEvent(
                    type=StreamEventType.ERROR,
                    error=GenerationCancelledError(f"{self._name} stream cancelled"),
                )
                return
            await asyncio.sleep(0)
            yield StreamEvent(
                type=StreamEventType.TOKEN,
                token=word if index == 0 else f" {word}",
            )
        yield StreamEvent(
            type=StreamEventType.DONE,
            usage=TokenUsage(
                prompt_tokens=len(request.prompt.split()),
                completion_tokens=len(words),
            ),
        )


def build_stub_providers(response: Optional[str] = None) -> Dict[str, LLMProvider]:
    """Stub providers registered under every supported provider name."""
    return {
        name.value: StubProvider(name=name.value, response=response)
        for name in LLMProviderName
    }
