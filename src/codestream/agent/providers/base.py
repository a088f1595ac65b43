"""Provider abstraction layer for LLM implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator


@dataclass
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


@dataclass
class StreamChunk:
    """A chunk of streaming response from the LLM."""

    content: str = ""
    usage: TokenUsage | None = None


class Provider(ABC):
    """Abstract base class for LLM providers.

    A provider is constructed once with its credentials and handed to the
    code that needs it; nothing holds a module-level client.
    """

    @abstractmethod
    def stream_completion(
        self,
        messages: list[dict[str, Any]],
        temperature: float | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream completion chunks from the LLM.

        Args:
            messages: List of message dicts with 'role' and 'content' keys
            temperature: Optional sampling temperature

        Yields:
            StreamChunk objects containing content and usage
        """
