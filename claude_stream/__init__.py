"""
Streaming completion client.

Sends a text-generation request to the completion API and renders the
text/event-stream response token by token as it arrives.
"""

from __future__ import annotations

# Imported first so structlog is configured before any logger is used
from claude_stream import logging_utils  # noqa: F401

__version__ = "0.1.0"
