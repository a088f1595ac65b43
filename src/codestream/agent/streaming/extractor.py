"""Streaming artifact extractor for code block markers."""

from __future__ import annotations

import logging
from typing import Callable

from codestream.core.artifacts import Artifact, ArtifactStore
from codestream.utils.markers import (
    CODE_END,
    CODE_START,
    ExtractorMode,
    find_start_marker,
    partial_suffix_match,
)

logger = logging.getLogger(__name__)


class ArtifactExtractor:
    """Splits streamed text into narration and code artifacts in real-time.

    Chunks are applied in arrival order to a pending buffer which is
    examined in a loop until no further transition applies:
    NARRATING -> COLLECTING (on ``[CODE_START:lang]``) -> NARRATING (on ``[CODE_END]``)

    Text that could still turn out to be the beginning of a marker is held
    back; everything else is committed either to the narration or to the
    artifact being collected. The final narration and artifacts are the same
    however the input is split into chunks.

    Args:
        store: Artifact collection shared across requests. A private one is
               created when omitted.
        on_artifact_start: Parameterless callback fired once per new artifact.
    """

    def __init__(
        self,
        store: ArtifactStore | None = None,
        on_artifact_start: Callable[[], None] | None = None,
    ) -> None:
        self._store = store if store is not None else ArtifactStore()
        self.on_artifact_start = on_artifact_start
        self._mode = ExtractorMode.NARRATING
        self._buffer = ""
        self._narration = ""
        self._active: Artifact | None = None
        self._finalized = False

    @property
    def store(self) -> ArtifactStore:
        return self._store

    @property
    def mode(self) -> ExtractorMode:
        return self._mode

    @property
    def buffer(self) -> str:
        """Text received but not yet classified."""
        return self._buffer

    @property
    def narration(self) -> str:
        """Committed narration, with placeholders for closed artifacts."""
        return self._narration

    @property
    def active_artifact(self) -> Artifact | None:
        """The artifact being collected, if any."""
        return self._active

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    @property
    def display_text(self) -> str:
        """Best-effort live text: narration plus a placeholder for an open block."""
        if self._mode is ExtractorMode.COLLECTING and not self._finalized:
            return self._narration + self._active.placeholder
        return self._narration

    def reset(self) -> None:
        """Prepare for a new response. The artifact store is left untouched."""
        self._mode = ExtractorMode.NARRATING
        self._buffer = ""
        self._narration = ""
        self._active = None
        self._finalized = False

    def feed(self, chunk: str) -> str:
        """Apply one chunk of streamed text and return the live display text."""
        if self._finalized:
            error = "Extractor already finalized; call reset() first"
            raise RuntimeError(error)
        self._buffer += chunk
        while self._step():
            pass
        return self.display_text

    def finalize(self) -> str:
        """Flush held text at end of stream and return the final narration.

        An artifact still collecting keeps ``collecting=True``: its block was
        never confirmed complete, so only a placeholder is added to the
        narration. Idempotent.
        """
        if self._finalized:
            return self._narration

        if self._mode is ExtractorMode.COLLECTING:
            if self._buffer:
                self._active.append(self._buffer)
            self._narration += self._active.placeholder
            logger.debug("Stream ended inside artifact %s", self._active.id)
        else:
            self._narration += self._buffer
        self._buffer = ""
        self._finalized = True
        return self._narration

    def _step(self) -> bool:
        """Apply at most one transition; True if the buffer needs another pass."""
        if not self._buffer:
            return False
        if self._mode is ExtractorMode.NARRATING:
            return self._step_narrating()
        return self._step_collecting()

    def _step_narrating(self) -> bool:
        buffer = self._buffer
        marker = find_start_marker(buffer, CODE_START)
        if marker is not None:
            self._narration += buffer[: marker.start_index]
            self._buffer = buffer[marker.after :]
            self._start_artifact(marker.tag)
            return True

        # Hold back anything that may still become a start marker
        prefix_at = buffer.find(CODE_START)
        if prefix_at >= 0:
            keep = len(buffer) - prefix_at
        else:
            keep = partial_suffix_match(buffer, CODE_START)
        split = len(buffer) - keep
        self._narration += buffer[:split]
        self._buffer = buffer[split:]
        return False

    def _step_collecting(self) -> bool:
        buffer = self._buffer
        end = buffer.find(CODE_END)
        if end >= 0:
            self._active.append(buffer[:end])
            self._buffer = buffer[end + len(CODE_END) :]
            self._finish_artifact()
            return True

        keep = partial_suffix_match(buffer, CODE_END)
        split = len(buffer) - keep
        if split:
            self._active.append(buffer[:split])
        self._buffer = buffer[split:]
        return False

    def _start_artifact(self, language: str) -> None:
        artifact = Artifact(language=language)
        self._active = artifact
        self._mode = ExtractorMode.COLLECTING
        self._store.add(artifact)
        logger.info("Artifact started: %s (%r)", artifact.id, language)
        if self.on_artifact_start:
            try:
                self.on_artifact_start()
            except Exception:
                logger.exception("Error in artifact start callback")

    def _finish_artifact(self) -> None:
        artifact = self._active
        artifact.close()
        self._narration += artifact.placeholder
        self._mode = ExtractorMode.NARRATING
        logger.info(
            "Artifact finished: %s (%d chars)", artifact.id, len(artifact.content)
        )
