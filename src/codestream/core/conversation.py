"""Conversation history for a chat."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Literal

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class Message:
    """A finalized chat message."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


def sanitize_history(messages: list[Any] | None) -> list[dict[str, str]]:
    """Reduce messages to plain ``{role, content}`` dicts safe to send upstream.

    Structured content is collapsed to its text part so audio buffers and
    other binary payloads never leave the client.
    """
    if not messages:
        return []

    sanitized: list[dict[str, str]] = []
    for message in messages:
        if isinstance(message, Message):
            sanitized.append(message.to_dict())
            continue

        content = message.get("content")
        if isinstance(content, list):
            text_item = next(
                (
                    item
                    for item in content
                    if isinstance(item, dict) and item.get("type") == "text"
                ),
                None,
            )
            text = text_item.get("text", "") if text_item else ""
        elif isinstance(content, str):
            text = content
        elif content:
            text = str(content)
        else:
            text = ""
        sanitized.append({"role": message.get("role", ""), "content": text})
    return sanitized


class ConversationHistory:
    """Append-only list of finalized messages.

    Only complete messages are ever stored; in-progress assistant text lives
    on the stream session until it is finalized.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> list[Message]:
        """Return a copy of the conversation history."""
        return list(self._messages)

    def add_user_message(self, content: str) -> Message:
        """Add a user message to the conversation."""
        message = Message(role="user", content=content)
        self._messages.append(message)
        return message

    def add_assistant_message(self, content: str) -> Message:
        """Add an assistant message to the conversation."""
        message = Message(role="assistant", content=content)
        self._messages.append(message)
        return message

    def sanitized(self) -> list[dict[str, str]]:
        return sanitize_history(self._messages)

    def clear(self) -> None:
        """Clear conversation history."""
        self._messages = []
