"""Provider implementations for LLM backends."""

from __future__ import annotations

from codestream.agent.providers.anyllm import AnyLLMProvider
from codestream.agent.providers.base import Provider, StreamChunk, TokenUsage

__all__ = [
    "AnyLLMProvider",
    "Provider",
    "StreamChunk",
    "TokenUsage",
]
