"""Response streaming: artifact extraction and per-turn sessions."""

from __future__ import annotations

from codestream.agent.streaming.extractor import ArtifactExtractor
from codestream.agent.streaming.session import SessionState, StreamSession

__all__ = [
    "ArtifactExtractor",
    "SessionState",
    "StreamSession",
]
