"""Any-LLM provider implementation."""

from __future__ import annotations

import logging
import traceback
from typing import Any, AsyncIterator

from codestream.agent.providers.base import Provider, StreamChunk, TokenUsage
from codestream.errors import TransportError

logger = logging.getLogger(__name__)

# Reasoning models reject an explicit temperature
NO_TEMPERATURE_MODELS = ("o1", "o1-mini", "o1-pro", "o3", "o3-mini", "o4-mini")


class AnyLLMProvider(Provider):
    """Provider implementation using the any-llm library.

    Supports any model compatible with any-llm (OpenAI, Anthropic, Gemini,
    Mistral and many others).
    """

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        provider: str | None = None,
        base_url: str | None = None,
    ) -> None:
        self.model = model
        self._api_key = api_key
        self._provider = provider
        self._base_url = base_url

    def _supports_temperature(self) -> bool:
        name = self.model.split("/")[-1].split(":")[-1]
        return name not in NO_TEMPERATURE_MODELS

    async def stream_completion(
        self,
        messages: list[dict[str, Any]],
        temperature: float | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream completion from any-llm."""
        from any_llm import acompletion

        kwargs: dict[str, Any] = dict(
            model=self.model,
            messages=messages,
            stream=True,
        )

        if self._api_key is not None:
            kwargs["api_key"] = self._api_key
        if self._provider is not None:
            kwargs["provider"] = self._provider
        if self._base_url is not None:
            kwargs["api_base"] = self._base_url
        if temperature is not None:
            if self._supports_temperature():
                kwargs["temperature"] = temperature
            else:
                logger.info("Model %s does not support temperature", self.model)

        try:
            stream = await acompletion(**kwargs)
        except Exception as e:
            error = f"Connection error: {traceback.format_exc()}"
            logger.error("%s", error)
            raise TransportError(f"Connection error: {e}") from e

        async for chunk in stream:
            stream_chunk = StreamChunk()

            if getattr(chunk, "usage", None):
                stream_chunk.usage = TokenUsage(
                    input_tokens=chunk.usage.prompt_tokens or 0,
                    output_tokens=chunk.usage.completion_tokens or 0,
                    total_tokens=chunk.usage.total_tokens or 0,
                )

            if chunk.choices and chunk.choices[0].delta.content:
                stream_chunk.content = chunk.choices[0].delta.content

            yield stream_chunk
