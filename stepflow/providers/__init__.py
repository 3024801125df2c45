"""Language model provider contract and the offline stub provider."""

from .base import (
    ChatMessage,
    GenerationRequest,
    LLMProvider,
    StreamEvent,
    StreamEventType,
    TokenUsage,
)
from .stub import StubProvider, build_stub_providers

__all__ = [
    "ChatMessage",
    "GenerationRequest",
    "LLMProvider",
    "StreamEvent",
    "StreamEventType",
    "StubProvider",
    "TokenUsage",
    "build_stub_providers",
]
