"""One request/response turn, from user send to finalized assistant message."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import TYPE_CHECKING, Callable

from codestream.agent.sse import EventType
from codestream.errors import TransportError

if TYPE_CHECKING:
    from codestream.agent.streaming.extractor import ArtifactExtractor
    from codestream.agent.transport import Transport
    from codestream.core.conversation import ConversationHistory, Message
    from codestream.core.modes import OutboundRequest

logger = logging.getLogger(__name__)

FAILURE_PREFIX = "An error occurred: "


class SessionState(enum.Enum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    FINALIZED = "finalized"
    ABANDONED = "abandoned"


class StreamSession:
    """Owns one turn's lifecycle: IDLE -> SENDING -> STREAMING -> FINALIZED.

    The user message is added to the history when the session begins. The
    assistant message is added exactly once, when the stream completes or
    fails; until then the partial reply is only visible through
    ``streaming_narration``. A session that is abandoned adds nothing.

    Args:
        history: Conversation the turn belongs to.
        extractor: Artifact extractor, reset at the start of the turn.
        user_input: Text of the user message (or transcribed speech).
        on_update: Optional callback receiving the live narration per chunk.
    """

    def __init__(
        self,
        history: ConversationHistory,
        extractor: ArtifactExtractor,
        user_input: str,
        on_update: Callable[[str], None] | None = None,
    ) -> None:
        self._history = history
        self._extractor = extractor
        self._user_input = user_input
        self._on_update = on_update
        self._state = SessionState.IDLE
        self._message: Message | None = None
        self.streaming_narration = ""

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def message(self) -> Message | None:
        """The finalized assistant message, once there is one."""
        return self._message

    @property
    def is_closed(self) -> bool:
        return self._state in (SessionState.FINALIZED, SessionState.ABANDONED)

    @property
    def is_active(self) -> bool:
        return self._state in (SessionState.SENDING, SessionState.STREAMING)

    def begin(self) -> None:
        """Record the user message and reset per-request streaming state."""
        if self._state is not SessionState.IDLE:
            error = f"Session already started ({self._state.value})"
            raise RuntimeError(error)
        self._history.add_user_message(self._user_input)
        self.streaming_narration = ""
        self._extractor.reset()
        self._state = SessionState.SENDING

    def on_chunk(self, text: str) -> None:
        """Apply one chunk of response text."""
        if self.is_closed:
            logger.debug("Ignoring chunk for closed session")
            return
        self._state = SessionState.STREAMING
        self.streaming_narration = self._extractor.feed(text)
        self._notify(self.streaming_narration)

    def on_chunk_error(self, message: str) -> None:
        """Skip a chunk the transport could not deliver."""
        if self.is_closed:
            return
        self._state = SessionState.STREAMING
        logger.warning("Skipping stream chunk: %s", message)

    def finish(self) -> Message | None:
        """Finalize after the stream completed. No-op once closed."""
        if self.is_closed:
            return self._message
        text = self._extractor.finalize()
        return self._finalize(text)

    def fail(self, error: BaseException | str) -> Message | None:
        """Finalize after the transport failed, keeping any partial reply."""
        if self.is_closed:
            return self._message
        text = self._extractor.finalize()
        if not text:
            text = f"{FAILURE_PREFIX}{error}"
        return self._finalize(text)

    def abandon(self) -> None:
        """Discard the turn without adding an assistant message."""
        if self.is_closed:
            return
        self._state = SessionState.ABANDONED
        self.streaming_narration = ""
        logger.info("Stream session abandoned")

    async def run(
        self, transport: Transport, request: OutboundRequest
    ) -> Message | None:
        """Drive the whole turn over *transport* and return the assistant message.

        Transport failures never escape: they finalize the session instead.
        Cancellation abandons the session and is re-raised.
        """
        self.begin()
        events = transport.stream(request)
        try:
            async for event in events:
                if event.type is EventType.CHUNK:
                    self.on_chunk(event.text)
                elif event.type is EventType.ERROR:
                    self.on_chunk_error(event.text)
                elif event.type is EventType.DONE:
                    self.finish()
                if self.is_closed:
                    break
        except asyncio.CancelledError:
            self.abandon()
            raise
        except TransportError as e:
            logger.error("Transport failed: %s", e)
            return self.fail(e)
        except Exception as e:
            logger.exception("Error while streaming response")
            return self.fail(e)
        finally:
            aclose = getattr(events, "aclose", None)
            if aclose is not None:
                await aclose()

        if not self.is_closed:
            logger.info("Stream closed without a done signal")
            self.finish()
        return self._message

    def _finalize(self, text: str) -> Message:
        self._message = self._history.add_assistant_message(text)
        self.streaming_narration = ""
        self._state = SessionState.FINALIZED
        return self._message

    def _notify(self, text: str) -> None:
        if self._on_update is None:
            return
        try:
            self._on_update(text)
        except Exception:
            logger.exception("Error in streaming update callback")
