"""
Error handling for completion streaming.

This module provides the error taxonomy with rich context:
- Configuration errors raised before any network activity
- Transport errors from building or sending the request
- Streaming errors from reading the response body
- Protocol errors for event payloads that break the schema
"""

from __future__ import annotations


class ClaudeStreamError(Exception):
    """Base completion error with rich context."""

    def __init__(
        self,
        message: str,
        *,
        step: str | None = None,
        status_code: int | None = None,
        raw_data: str | None = None,
    ):
        super().__init__(message)
        self.step = step
        self.status_code = status_code
        self.raw_data = raw_data


class ConfigurationError(ClaudeStreamError):
    """Invalid or conflicting options, detected before any request is sent."""
    pass


class CredentialNotFoundError(ConfigurationError):
    """No API key available for the requested host."""

    def __init__(self, hostname: str, **kwargs):
        super().__init__(f"no credentials for {hostname}", **kwargs)
        self.hostname = hostname


class TransportError(ClaudeStreamError):
    """Request construction or connection failure."""
    pass


class StreamingError(ClaudeStreamError):
    """Read failure while consuming the response body."""
    pass


class ProtocolError(ClaudeStreamError):
    """Event payload does not match the expected message shape."""
    pass
