"""
Streaming-specific models for the event-stream pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventName(Enum):
    """Event names sent by the completion API."""
    COMPLETION = "completion"
    ERROR = "error"
    MESSAGE = "message"


DEFAULT_EVENT_NAME = EventName.MESSAGE.value


@dataclass(frozen=True)
class Event:
    """One dispatched event from a text/event-stream body."""
    name: str
    data: str


@dataclass
class StreamCursor:
    """Mutable per-session state shared by the decoder and the dispatcher."""
    event_name: str = ""
    data_buffer: str = ""
    has_data: bool = False
    first_token_emitted: bool = False

    def reset_pending(self) -> None:
        """Clear the fields of the event being accumulated."""
        self.event_name = ""
        self.data_buffer = ""
        self.has_data = False


class CompletionMessage(BaseModel):
    """Payload of a "completion" event."""
    model_config = ConfigDict(extra="ignore")

    completion: str = ""
    stop_reason: str | None = None
    model: str = ""

    @field_validator("completion", "model", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ErrorDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = ""
    message: str = ""

    @field_validator("type", "message", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ErrorMessage(BaseModel):
    """Payload of an "error" event: {"error": {"type": ..., "message": ...}}."""
    model_config = ConfigDict(extra="ignore")

    error: ErrorDetails = Field(default_factory=ErrorDetails)

    @field_validator("error", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def kind(self) -> str:
        return self.error.type

    @property
    def message(self) -> str:
        return self.error.message
