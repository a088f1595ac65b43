"""Exceptions raised by codestream."""

from __future__ import annotations


class CodestreamError(Exception):
    """Base class for all codestream errors."""


class TransportError(CodestreamError):
    """The transport failed before the stream reached its done signal."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionBusyError(CodestreamError):
    """A stream session is already active for this conversation."""


class ArtifactClosedError(CodestreamError):
    """Content was appended to an artifact that finished collecting."""
