"""Chat client - one conversation with history, artifacts and an active mode."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from codestream.agent.streaming import ArtifactExtractor, StreamSession
from codestream.config import CodestreamConfig
from codestream.core.artifacts import Artifact, ArtifactStore
from codestream.core.conversation import ConversationHistory, Message
from codestream.core.modes import (
    InteractionMode,
    OutboundRequest,
    RequestContext,
    encode_request,
)
from codestream.errors import SessionBusyError

if TYPE_CHECKING:
    from codestream.agent.transport import Transport

logger = logging.getLogger(__name__)


class ChatClient:
    """Sends chat turns over a transport and keeps the resulting state.

    Exposes what a renderer needs: ``history`` (finalized messages),
    ``artifacts`` (every code artifact of the conversation),
    ``current_artifact`` (the one on display, settable) and
    ``streaming_narration`` (live text of the turn in progress).

    Only one turn may stream at a time.
    """

    def __init__(
        self,
        transport: Transport,
        config: CodestreamConfig | None = None,
        on_artifact_start: Callable[[], None] | None = None,
        on_update: Callable[[str], None] | None = None,
    ) -> None:
        self.config = config if config is not None else CodestreamConfig()
        self.history = ConversationHistory()
        self.artifacts = ArtifactStore()
        self.mode = InteractionMode.from_name(self.config.default_mode)
        self.on_update = on_update
        self._transport = transport
        self._extractor = ArtifactExtractor(self.artifacts, on_artifact_start)
        self._session: StreamSession | None = None

    @property
    def on_artifact_start(self) -> Callable[[], None] | None:
        return self._extractor.on_artifact_start

    @on_artifact_start.setter
    def on_artifact_start(self, callback: Callable[[], None] | None) -> None:
        self._extractor.on_artifact_start = callback

    @property
    def is_busy(self) -> bool:
        return self._session is not None and self._session.is_active

    @property
    def streaming_narration(self) -> str:
        if self._session is None:
            return ""
        return self._session.streaming_narration

    @property
    def current_artifact(self) -> Artifact | None:
        return self.artifacts.current

    @current_artifact.setter
    def current_artifact(self, artifact: Artifact | None) -> None:
        self.artifacts.current = artifact

    def toggle_mode(self, mode: InteractionMode) -> InteractionMode:
        """Switch to *mode*, or back to chat if it is already active."""
        self.mode = self.mode.toggle(mode)
        return self.mode

    def build_request(
        self,
        text: str,
        mode: InteractionMode,
        attachment: Path | None = None,
    ) -> OutboundRequest:
        """Encode a request for *text* against the current history."""
        ctx = RequestContext(
            user_input=text,
            history=self.history.sanitized(),
            model=self.config.model,
            instructions=self.config.instructions,
            temperature=self.config.temperature,
            search_instructions=self.config.search_instructions,
            search_size=self.config.search_size,
            attachment=attachment,
        )
        return encode_request(mode, ctx)

    async def send(
        self,
        text: str,
        mode: InteractionMode | None = None,
        attachment: Path | None = None,
    ) -> Message | None:
        """Send one user message and stream the reply.

        Returns the assistant message, or None when *text* is blank or the
        turn was abandoned.
        """
        trimmed = text.strip()
        if not trimmed:
            return None
        if self.is_busy:
            error = "A response is still streaming for this conversation"
            raise SessionBusyError(error)

        mode = mode if mode is not None else self.mode
        request = self.build_request(trimmed, mode, attachment)
        session = StreamSession(
            self.history, self._extractor, trimmed, on_update=self.on_update
        )
        self._session = session
        logger.info("Sending %s message (%d chars)", mode.value.name, len(trimmed))
        return await session.run(self._transport, request)

    async def send_transcription(self, transcript: str) -> Message | None:
        """Send transcribed speech as an audio-mode turn."""
        return await self.send(transcript, InteractionMode.AUDIO)

    def clear(self) -> None:
        """Reset the conversation and drop all artifacts."""
        if self.is_busy:
            error = "Cannot clear while a response is streaming"
            raise SessionBusyError(error)
        self.history.clear()
        self.artifacts.clear()
        self._extractor.reset()
        self._session = None
