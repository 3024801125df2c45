"""
base.py - Abstract base class for language model providers.

Providers are collaborators of the plan-generation step. The engine only
needs ``generate``; ``stream`` is part of the contract for callers that want
tokens as they arrive.

Providers are responsible for:
- Talking to their backend (wire protocol, retries, streaming internals)
- Honouring ``GenerationRequest.cancellation``

Providers do NOT own:
- Prompt construction (the step builds the prompt)
- Output handling (the step logs and stores the text)
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, List, Optional

from stepflow.errors import GenerationCancelledError


@dataclass(frozen=True)
class ChatMessage:
    role: str  # system | user | assistant | tool | function
    content: str


@dataclass
class GenerationRequest:
    """Input to a provider call.

    Attributes:
        prompt: The fully rendered prompt.
        model: Model identifier understood by the provider.
        temperature: Sampling temperature.
        max_tokens: Completion token limit.
        messages: Conversation form of the prompt.
        system_prompt: Optional system instruction.
        cancellation: Event the caller sets to abandon the call.
    """
    prompt: str
    model: str
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    messages: List[ChatMessage] = field(default_factory=list)
    system_prompt: Optional[str] = None
    cancellation: Optional[asyncio.Event] = None

    @property
    def cancelled(self) -> bool:
        return self.cancellation is not None and self.cancellation.is_set()


class StreamEventType(Enum):
    TOKEN = "token"
    ERROR = "error"
    DONE = "done"


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass(frozen=True)
class StreamEvent:
    """One event from ``LLMProvider.stream``.

    Only the field matching ``type`` is populated.
    """
    type: StreamEventType
    token: Optional[str] = None
    error: Optional[Exception] = None
    usage: Optional[TokenUsage] = None


class LLMProvider(ABC):
    """Abstract base class for language model providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique identifier for this provider (e.g., 'openai', 'claude')."""
        ...

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Model used when a step does not name one."""
        ...

    def available_models(self) -> List[str]:
        return [self.default_model]

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> str:
        """Generate a complete response.

        Raises:
            GenerationCancelledError: If ``request.cancellation`` is set.
            CollaboratorError: On any backend failure.
        """
        ...

    @abstractmethod
    def stream(self, request: GenerationRequest) -> AsyncIterator[StreamEvent]:
        """Yield token events, then exactly one done or error event."""
        ...

    def check_cancelled(self, request: GenerationRequest) -> None:
        """Raise GenerationCancelledError if the caller cancelled ``request``."""
        if request.cancelled:
            raise GenerationCancelledError(
                f"{self.provider_name} generation cancelled",
                context={"provider": self.provider_name, "model": request.model},
            )
