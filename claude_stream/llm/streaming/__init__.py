"""
Streaming functionality for the completion client.

This package contains:
- text/event-stream decoding
- Event dispatch to the output streams
"""

from __future__ import annotations

from .decoder import EventStreamDecoder, consume_line
from .dispatcher import EventDispatcher
from .models import CompletionMessage, ErrorMessage, Event, EventName, StreamCursor

__all__ = [
    "CompletionMessage",
    "ErrorMessage",
    "Event",
    "EventDispatcher",
    "EventName",
    "EventStreamDecoder",
    "StreamCursor",
    "consume_line",
]
