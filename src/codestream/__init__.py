from .agent import ChatClient, DirectTransport, HttpTransport, create_transport
from .agent.streaming import ArtifactExtractor, SessionState, StreamSession
from .config import CodestreamConfig, load_config
from .core import Artifact, ArtifactStore, ConversationHistory, InteractionMode, Message

__all__ = [
    "Artifact",
    "ArtifactExtractor",
    "ArtifactStore",
    "ChatClient",
    "CodestreamConfig",
    "ConversationHistory",
    "DirectTransport",
    "HttpTransport",
    "InteractionMode",
    "Message",
    "SessionState",
    "StreamSession",
    "create_transport",
    "load_config",
]
__version__ = "0.1.0"
