"""Shared fixtures for codestream tests."""

import pytest

from codestream.agent.sse import StreamEvent
from codestream.agent.transport import Transport
from codestream.core.artifacts import ArtifactStore
from codestream.core.conversation import ConversationHistory


class FakeTransport(Transport):
    """Replays scripted events; plain strings are sent as chunks.

    If *error* is set it is raised after the scripted events.
    """

    def __init__(self, events=(), error=None):
        self.events = list(events)
        self.error = error
        self.requests = []

    async def stream(self, request):
        self.requests.append(request)
        for event in self.events:
            if isinstance(event, str):
                event = StreamEvent.chunk(event)
            yield event
        if self.error is not None:
            raise self.error


@pytest.fixture
def fake_transport():
    """Factory for scripted transports."""
    return FakeTransport


@pytest.fixture
def history():
    return ConversationHistory()


@pytest.fixture
def store():
    return ArtifactStore()


@pytest.fixture
def tmp_config_dir(tmp_path):
    """Provide a temporary config directory."""
    config_dir = tmp_path / "config" / "codestream"
    config_dir.mkdir(parents=True)
    return config_dir
