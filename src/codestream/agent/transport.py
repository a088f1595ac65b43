"""Transports that deliver a streamed response as StreamEvents."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, AsyncIterator

import httpx

from codestream.agent.sse import EventType, StreamEvent, decode_sse_line
from codestream.core.modes import InteractionMode
from codestream.errors import TransportError

if TYPE_CHECKING:
    from codestream.agent.providers.base import Provider
    from codestream.core.modes import OutboundRequest

logger = logging.getLogger(__name__)

CODE_MARKER_INSTRUCTIONS = """\
You are a helpful AI assistant capable of generating detailed responses including code snippets and other artifacts.

IMPORTANT INSTRUCTION ABOUT CODE FORMATTING:
Whenever you need to write code:
1. First, send the marker "[CODE_START:language]"
2. Write your code without markdown backticks
3. End with "[CODE_END]"

Always use these markers and provide detailed explanations."""


class Transport(ABC):
    """Delivers the response to one request as an ordered stream of events.

    The stream normally ends with a DONE event. Per-chunk problems arrive as
    ERROR events; failures of the transport itself raise ``TransportError``.
    """

    @abstractmethod
    def stream(self, request: OutboundRequest) -> AsyncIterator[StreamEvent]:
        """Send *request* and yield the events of its response."""


class HttpTransport(Transport):
    """Streams responses from the chat backend over HTTP.

    Args:
        client: Shared ``httpx.AsyncClient``; its lifetime is owned by the caller.
        base_url: Backend root, e.g. ``http://localhost:8000``.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str = "") -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    def _request_kwargs(self, request: OutboundRequest) -> dict[str, Any]:
        if request.is_multipart:
            return {"data": request.data or {}, "files": request.files}
        return {"json": request.json or {}}

    async def stream(self, request: OutboundRequest) -> AsyncIterator[StreamEvent]:
        url = f"{self._base_url}{request.endpoint}"
        logger.info("POST %s (%s mode)", url, request.mode.value.name)
        try:
            async with self._client.stream(
                "POST", url, **self._request_kwargs(request)
            ) as response:
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    error = (
                        f"Server responded with status {response.status_code}: {body}"
                    )
                    raise TransportError(error, status_code=response.status_code)

                content_type = response.headers.get("content-type", "")
                if "text/event-stream" in content_type:
                    async for line in response.aiter_lines():
                        event = decode_sse_line(line)
                        if event is None:
                            continue
                        yield event
                        if event.type is EventType.DONE:
                            return
                else:
                    async for text in response.aiter_text():
                        if text:
                            yield StreamEvent.chunk(text)
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {url} failed: {e}") from e


class DirectTransport(Transport):
    """Calls the language model in-process instead of going through a backend.

    Mirrors what the backend does for JSON requests: the instructions become
    the system message, code mode adds the artifact marker instructions, and
    the provider's text deltas are forwarded as chunks.
    """

    def __init__(
        self,
        provider: Provider,
        code_instructions: str = CODE_MARKER_INSTRUCTIONS,
    ) -> None:
        self._provider = provider
        self._code_instructions = code_instructions

    def build_messages(self, request: OutboundRequest) -> list[dict[str, str]]:
        body = request.json or {}
        instructions = body.get("instructions") or body.get("systemInstructions") or ""
        if request.mode is InteractionMode.CODE:
            instructions = (
                f"{instructions}\n\n{self._code_instructions}"
                if instructions
                else self._code_instructions
            )

        messages: list[dict[str, str]] = []
        if instructions:
            messages.append({"role": "system", "content": instructions})
        history = body.get("history")
        if history:
            messages.extend(history)
        else:
            messages.append({"role": "user", "content": body.get("userInput", "")})
        return messages

    async def stream(self, request: OutboundRequest) -> AsyncIterator[StreamEvent]:
        if request.is_multipart:
            error = f"{request.mode.value.name} mode requires the HTTP backend"
            raise TransportError(error)

        messages = self.build_messages(request)
        temperature = (request.json or {}).get("temperature")
        sent = False
        usage = None
        async for chunk in self._provider.stream_completion(
            messages, temperature=temperature
        ):
            if chunk.usage is not None:
                usage = chunk.usage
            if chunk.content:
                sent = True
                yield StreamEvent.chunk(chunk.content)

        if not sent:
            logger.warning("No content was sent during the stream")
        if usage is not None:
            logger.info(
                "Token usage: %d input, %d output, %d total",
                usage.input_tokens,
                usage.output_tokens,
                usage.total_tokens,
            )
        yield StreamEvent.done()
