"""Interaction modes and the request shape each one sends."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable


@dataclass(frozen=True)
class ModeConfig:
    """Configuration for an interaction mode."""

    name: str
    endpoint: str


class InteractionMode(enum.Enum):
    """Available interaction modes for a chat turn."""

    CHAT = ModeConfig("chat", "/chat/stream")
    CODE = ModeConfig("code", "/code")
    SEARCH = ModeConfig("search", "/search/realtime")
    FILE = ModeConfig("file", "/filestream")
    AUDIO = ModeConfig("audio", "/chat/stream")

    @classmethod
    def from_name(cls, name: str) -> InteractionMode:
        """Get mode by name string."""
        for mode in cls:
            if mode.value.name == name:
                return mode
        raise ValueError(f"Unknown mode: {name}")

    @property
    def endpoint(self) -> str:
        return self.value.endpoint

    def toggle(self, other: InteractionMode) -> InteractionMode:
        """Switch to *other*, or back to chat if *other* is already active."""
        if self == other:
            return InteractionMode.CHAT
        return other


@dataclass
class RequestContext:
    """Everything an encoder may need to build one request."""

    user_input: str
    history: list[dict[str, str]] = field(default_factory=list)
    model: str = "gpt-4o-mini"
    instructions: str = ""
    temperature: float = 0.7
    search_instructions: str = ""
    search_size: str = "medium"
    attachment: Path | None = None

    @property
    def user_message(self) -> dict[str, str]:
        return {"role": "user", "content": self.user_input}


@dataclass
class OutboundRequest:
    """A request ready for a transport: JSON body or multipart form."""

    mode: InteractionMode
    endpoint: str
    json: dict[str, Any] | None = None
    data: dict[str, str] | None = None
    files: dict[str, tuple[str, bytes]] | None = None

    @property
    def is_multipart(self) -> bool:
        return self.files is not None


Encoder = Callable[[RequestContext], OutboundRequest]

_ENCODERS: dict[InteractionMode, Encoder] = {}


def _encoder(*modes: InteractionMode) -> Callable[[Encoder], Encoder]:
    def register(func: Encoder) -> Encoder:
        for mode in modes:
            _ENCODERS[mode] = func
        return func

    return register


def _chat_body(ctx: RequestContext) -> dict[str, Any]:
    return {
        "userInput": ctx.user_input,
        "history": [*ctx.history, ctx.user_message],
        "model": ctx.model,
        "instructions": ctx.instructions,
        "temperature": ctx.temperature,
    }


@_encoder(InteractionMode.CHAT)
def encode_chat(ctx: RequestContext) -> OutboundRequest:
    return OutboundRequest(
        InteractionMode.CHAT, InteractionMode.CHAT.endpoint, json=_chat_body(ctx)
    )


@_encoder(InteractionMode.AUDIO)
def encode_audio(ctx: RequestContext) -> OutboundRequest:
    # Transcribed speech travels through the normal chat endpoint
    return OutboundRequest(
        InteractionMode.AUDIO, InteractionMode.AUDIO.endpoint, json=_chat_body(ctx)
    )


@_encoder(InteractionMode.CODE)
def encode_code(ctx: RequestContext) -> OutboundRequest:
    return OutboundRequest(
        InteractionMode.CODE, InteractionMode.CODE.endpoint, json=_chat_body(ctx)
    )


@_encoder(InteractionMode.SEARCH)
def encode_search(ctx: RequestContext) -> OutboundRequest:
    body = {
        "userInput": ctx.user_input,
        "systemInstructions": ctx.search_instructions,
        "searchSize": ctx.search_size,
        "model": ctx.model,
    }
    return OutboundRequest(
        InteractionMode.SEARCH, InteractionMode.SEARCH.endpoint, json=body
    )


@_encoder(InteractionMode.FILE)
def encode_file(ctx: RequestContext) -> OutboundRequest:
    if ctx.attachment is None:
        error = "File mode requires an attachment"
        raise ValueError(error)
    data = {
        "userInput": ctx.user_input,
        "history": json.dumps([*ctx.history, ctx.user_message]),
        "systemInstructions": ctx.instructions,
        "model": ctx.model,
        "temperature": str(ctx.temperature),
    }
    files = {"file": (ctx.attachment.name, ctx.attachment.read_bytes())}
    return OutboundRequest(
        InteractionMode.FILE, InteractionMode.FILE.endpoint, data=data, files=files
    )


def encode_request(mode: InteractionMode, ctx: RequestContext) -> OutboundRequest:
    """Build the outbound request for *mode*."""
    return _ENCODERS[mode](ctx)
