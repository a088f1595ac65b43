"""Agent - sends chat turns and streams replies into narration and artifacts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .client import ChatClient
from .providers import AnyLLMProvider
from .transport import DirectTransport, HttpTransport, Transport

if TYPE_CHECKING:
    import httpx

    from ..config import CodestreamConfig

__all__ = [
    "ChatClient",
    "DirectTransport",
    "HttpTransport",
    "Transport",
    "create_transport",
]

logger = logging.getLogger(__name__)


def create_transport(
    config: CodestreamConfig, http_client: httpx.AsyncClient | None = None
) -> Transport:
    """Instantiate the transport selected by ``config.transport``.

    - ``"http"``: stream from the chat backend at ``config.base_url`` using
      *http_client*, whose lifetime the caller owns.
    - ``"direct"``: call the model in-process through any-llm with
      ``config.model``, ``config.provider`` and the key named by
      ``config.api_key_env``.
    """
    kind = (config.transport or "http").lower()
    logger.info("Creating %s transport (model=%s)", kind, config.model)

    if kind == "direct":
        provider = AnyLLMProvider(
            model=config.model,
            api_key=config.api_key,
            provider=config.provider,
        )
        return DirectTransport(provider)

    if kind == "http":
        if http_client is None:
            error = "The http transport requires an httpx.AsyncClient"
            raise ValueError(error)
        return HttpTransport(http_client, config.base_url)

    error = f"Unknown transport: {config.transport!r}"
    raise ValueError(error)
