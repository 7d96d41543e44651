"""
Incremental text/event-stream decoder.

Turns the raw byte chunks of a response body into discrete named events.
Lines may arrive split across reads; an event is only produced once its
terminating blank line has been seen.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from .models import DEFAULT_EVENT_NAME, Event, StreamCursor

LINE_TERMINATOR = b"\n"
CARRIAGE_RETURN = b"\r"
COMMENT_PREFIX = ":"


def consume_line(cursor: StreamCursor, line: str) -> Event | None:
    """
    Apply one line (without its terminator) to the pending event.

    Returns the completed event when the line is a dispatch boundary and the
    pending block carried data, otherwise None.
    """
    if not line:
        event = None
        if cursor.data_buffer:
            event = Event(
                name=cursor.event_name or DEFAULT_EVENT_NAME,
                data=cursor.data_buffer,
            )
        cursor.reset_pending()
        return event

    if line.startswith(COMMENT_PREFIX):
        return None

    field, _, value = line.partition(":")
    if value.startswith(" "):
        value = value[1:]

    if field == "event":
        cursor.event_name = value
    elif field == "data":
        if cursor.has_data:
            cursor.data_buffer += "\n"
        cursor.data_buffer += value
        cursor.has_data = True
    # id, retry and unknown fields carry nothing for this client

    return None


class EventStreamDecoder:
    """Decode a byte stream into events, one per decode() call."""

    def __init__(
        self,
        source: AsyncIterator[bytes],
        cursor: StreamCursor | None = None,
    ):
        self.cursor = cursor if cursor is not None else StreamCursor()
        self._source = source
        self._buffer = bytearray()
        self._line_start = 0
        self._scan_from = 0
        self._exhausted = False
        self.stats = {
            'lines': 0,
            'events': 0,
            'comments': 0,
            'discarded_partials': 0,
        }

    async def decode(self) -> Event | None:
        """
        Return the next completed event.

        Returns None on a clean end of stream, and keeps returning None on
        every later call. Read errors from the source propagate unchanged.
        """
        while True:
            if self._exhausted:
                return None

            while (end := self._buffer.find(LINE_TERMINATOR, self._scan_from)) != -1:
                raw_line = bytes(self._buffer[self._line_start:end])
                self._line_start = self._scan_from = end + 1
                if raw_line.endswith(CARRIAGE_RETURN):
                    raw_line = raw_line[:-1]

                line = raw_line.decode("utf-8", errors="replace")
                self.stats['lines'] += 1
                if line.startswith(COMMENT_PREFIX):
                    self.stats['comments'] += 1

                event = consume_line(self.cursor, line)
                if event is not None:
                    self.stats['events'] += 1
                    return event

            # Only the unterminated tail is kept and never rescanned
            del self._buffer[:self._line_start]
            self._line_start = 0
            self._scan_from = len(self._buffer)

            try:
                chunk = await anext(self._source)
            except StopAsyncIteration:
                self._finish()
                return None

            self._buffer.extend(chunk)

    def _finish(self) -> None:
        """Drop whatever never saw its terminating blank line."""
        if len(self._buffer) > self._line_start or self.cursor.has_data:
            self.stats['discarded_partials'] += 1
        self._buffer.clear()
        self._line_start = self._scan_from = 0
        self.cursor.reset_pending()
        self._exhausted = True

    def __aiter__(self) -> EventStreamDecoder:
        return self

    async def __anext__(self) -> Event:
        event = await self.decode()
        if event is None:
            raise StopAsyncIteration
        return event

    def get_stats(self) -> dict[str, int]:
        """Get decoding statistics for monitoring."""
        return self.stats.copy()
