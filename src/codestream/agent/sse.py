"""Decoding of the backend's server-sent event stream.

The backend writes one ``data:`` line per event: ``{"content": "..."}`` for
text, ``{"error": "..."}`` when generation hit a problem, and ``[DONE]`` when
the response is complete.
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DONE_TOKEN = "[DONE]"
DATA_PREFIX = "data:"


class EventType(enum.Enum):
    CHUNK = "chunk"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class StreamEvent:
    """One event delivered by a transport.

    ERROR events describe a problem with a single chunk; the stream carries
    on after them. Failures of the transport itself are raised as
    ``TransportError`` instead.
    """

    type: EventType
    text: str = ""

    @classmethod
    def chunk(cls, text: str) -> StreamEvent:
        return cls(EventType.CHUNK, text)

    @classmethod
    def done(cls) -> StreamEvent:
        return cls(EventType.DONE)

    @classmethod
    def error(cls, message: str) -> StreamEvent:
        return cls(EventType.ERROR, message)


def decode_sse_line(line: str) -> StreamEvent | None:
    """Decode one line of an event stream.

    Returns None for lines that carry nothing (blank lines, comments, events
    without content). Non-``data:`` lines are passed through as raw text.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith(":"):
        return None

    if not stripped.startswith(DATA_PREFIX):
        return StreamEvent.chunk(stripped)

    payload = stripped[len(DATA_PREFIX) :].strip()
    if payload == DONE_TOKEN:
        return StreamEvent.done()

    try:
        envelope = json.loads(payload)
    except json.JSONDecodeError as e:
        return StreamEvent.error(f"Malformed event payload: {e}")

    if not isinstance(envelope, dict):
        return StreamEvent.error(f"Unexpected event payload: {payload[:80]}")
    if envelope.get("content"):
        return StreamEvent.chunk(str(envelope["content"]))
    if envelope.get("error"):
        message = str(envelope["error"])
        if envelope.get("message"):
            message = f"{message}: {envelope['message']}"
        return StreamEvent.error(message)
    return None
