"""
Completion API integration.

This package provides:
- Request options and payload assembly
- Streaming HTTP transport
- Event-stream decoding and dispatch
- A session that drives one streamed exchange
"""

from __future__ import annotations

from .exceptions import (
    ClaudeStreamError,
    ConfigurationError,
    CredentialNotFoundError,
    ProtocolError,
    StreamingError,
    TransportError,
)
from .models import (
    CompletionOptions,
    build_request_payload,
    format_prompt,
    serialize_request,
)

__all__ = [
    # Exceptions
    "ClaudeStreamError",
    # Request models
    "CompletionOptions",
    "ConfigurationError",
    "CredentialNotFoundError",
    "ProtocolError",
    "StreamingError",
    "TransportError",
    "build_request_payload",
    "format_prompt",
    "serialize_request",
]
