"""
Event dispatch: interprets decoded events into rendered output.
"""

from __future__ import annotations

import json
from typing import Any, TextIO, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from ..exceptions import ProtocolError
from .models import (
    CompletionMessage,
    ErrorMessage,
    Event,
    EventName,
    StreamCursor,
)

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


class EventDispatcher:
    """
    Render completion tokens to stdout and upstream errors to stderr.

    Upstream error events are reported and the stream keeps going; only a
    payload that fails to parse stops the session.
    """

    def __init__(
        self,
        stdout: TextIO,
        stderr: TextIO,
        cursor: StreamCursor | None = None,
    ):
        self.stdout = stdout
        self.stderr = stderr
        self.cursor = cursor if cursor is not None else StreamCursor()
        self.stats: dict[str, Any] = {
            'tokens': 0,
            'errors': 0,
            'ignored': 0,
            'stop_reason': None,
            'model': None,
        }

    def dispatch(self, event: Event) -> None:
        """Apply one event. Raises ProtocolError on a malformed payload."""
        if event.name == EventName.COMPLETION.value:
            message = self._parse(CompletionMessage, event)
            self._emit_token(message)
        elif event.name == EventName.ERROR.value:
            message = self._parse(ErrorMessage, event)
            self._report_error(message)
        else:
            self.stats['ignored'] += 1
            logger.debug("Ignoring event", event_name=event.name)

    def finish(self) -> None:
        """Terminate the rendered output with a single newline."""
        self.stdout.write("\n")
        self.stdout.flush()

    def _parse(
        self, model: type[M], event: Event
    ) -> M:
        try:
            return model.model_validate_json(event.data)
        except ValidationError as e:
            raise ProtocolError(
                f"parse {json.dumps(event.data)}: {e}",
                step="dispatch",
                raw_data=event.data,
            ) from e

    def _emit_token(self, message: CompletionMessage) -> None:
        token = message.completion
        if not self.cursor.first_token_emitted:
            token = token.removeprefix(" ")
            self.cursor.first_token_emitted = True

        self.stdout.write(token)
        self.stdout.flush()

        self.stats['tokens'] += 1
        if message.stop_reason:
            self.stats['stop_reason'] = message.stop_reason
        if message.model:
            self.stats['model'] = message.model

    def _report_error(self, message: ErrorMessage) -> None:
        quoted = json.dumps(message.message, ensure_ascii=False)
        self.stderr.write(f"Error code={message.kind}: {quoted}\n")
        self.stderr.flush()

        self.stats['errors'] += 1
        logger.info(
            "Upstream reported error", error_kind=message.kind,
            error_message=message.message,
        )

    def get_stats(self) -> dict[str, Any]:
        """Get dispatch statistics for monitoring."""
        return self.stats.copy()
