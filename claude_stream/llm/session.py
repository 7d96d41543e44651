"""
One request/response exchange, from request body to rendered output.
"""

from __future__ import annotations

from enum import Enum

import httpx

from claude_stream.logging_utils import operation_context

from .client import CompletionClient
from .exceptions import StreamingError
from .models import CompletionOptions, build_request_payload, serialize_request
from .streaming.decoder import EventStreamDecoder
from .streaming.dispatcher import EventDispatcher

HTTP_OK_RANGE = range(200, 300)


class SessionState(Enum):
    """Lifecycle of a streaming session."""
    IDLE = "idle"
    REQUEST_SENT = "request_sent"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


class StreamingSession:
    """
    Drive one completion stream to a terminal state.

    Decoding and dispatch run in the same flow: each event is fully
    dispatched before the next one is decoded. Any fatal error leaves the
    session FAILED and propagates; tokens already written stay written.
    """

    def __init__(self, client: CompletionClient, dispatcher: EventDispatcher):
        self.client = client
        self.dispatcher = dispatcher
        self.state = SessionState.IDLE
        self.status_code: int | None = None
        self.decoder_stats: dict[str, int] = {}

    async def run(self, prompt: str, options: CompletionOptions) -> SessionState:
        """Send the request and render the streamed completion."""
        context = {"model": options.model, "max_tokens": options.max_tokens}
        async with operation_context("completion_stream", context=context) as log:
            try:
                await self._run(prompt, options, log)
            except Exception:
                self.state = SessionState.FAILED
                raise

        return self.state

    async def _run(self, prompt: str, options: CompletionOptions, log) -> None:
        body = serialize_request(build_request_payload(prompt, options))

        self.state = SessionState.REQUEST_SENT
        async with self.client.open_stream(body) as response:
            self.status_code = response.status_code
            if response.status_code not in HTTP_OK_RANGE:
                # Structured errors, if any, arrive as "error" events
                log.warning(
                    "Non-success status, decoding body anyway",
                    status_code=response.status_code,
                )

            self.state = SessionState.STREAMING
            decoder = EventStreamDecoder(
                response.aiter_bytes(), cursor=self.dispatcher.cursor
            )
            try:
                while True:
                    try:
                        event = await decoder.decode()
                    except httpx.HTTPError as e:
                        raise StreamingError(
                            f"decoding: {e}",
                            step="decode",
                            status_code=response.status_code,
                        ) from e

                    if event is None:
                        break
                    self.dispatcher.dispatch(event)
            finally:
                self.decoder_stats = decoder.get_stats()

        self.dispatcher.finish()
        self.state = SessionState.COMPLETED
        log.info(
            "Stream finished", **self.decoder_stats, **self.dispatcher.get_stats()
        )
