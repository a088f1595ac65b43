"""Core domain layer - conversation, artifacts and modes."""

from __future__ import annotations

from codestream.core.artifacts import Artifact, ArtifactStore, make_title
from codestream.core.conversation import ConversationHistory, Message, sanitize_history
from codestream.core.modes import (
    InteractionMode,
    ModeConfig,
    OutboundRequest,
    RequestContext,
    encode_request,
)

__all__ = [
    "Artifact",
    "ArtifactStore",
    "ConversationHistory",
    "InteractionMode",
    "Message",
    "ModeConfig",
    "OutboundRequest",
    "RequestContext",
    "encode_request",
    "make_title",
    "sanitize_history",
]
