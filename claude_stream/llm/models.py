"""
Completion request models.

This module provides the request side of a completion exchange:
- Sampling options with validation
- Human/Assistant prompt formatting
- JSON payload assembly with optional-field omission
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .exceptions import ConfigurationError, TransportError

HUMAN_PROMPT = "\n\nHuman:"
AI_PROMPT = "\n\nAssistant:"


@dataclass(frozen=True)
class CompletionOptions:
    """Options for a single completion request."""
    model: str
    max_tokens: int
    temperature: float | None = None
    top_p: float | None = None
    raw: bool = False
    system: str = ""
    stream: bool = True

    def validate(self) -> None:
        """Reject conflicting or out-of-range options before any request."""
        if self.raw and self.system:
            raise ConfigurationError(
                "--system will be ignored when used with --raw!",
                step="options",
            )
        if self.max_tokens < 1:
            raise ConfigurationError(
                "max_tokens must be at least 1", step="options"
            )
        if not self.model:
            raise ConfigurationError("model must not be empty", step="options")


def format_prompt(system: str, prompt: str) -> str:
    """Wrap a prompt in the Human/Assistant turn format."""
    return f"{system}{HUMAN_PROMPT} {prompt}{AI_PROMPT}"


def _is_set(value: float | None) -> bool:
    return value is not None and value >= 0


def build_request_payload(prompt: str, options: CompletionOptions) -> dict[str, Any]:
    """Assemble the request parameters; unset sampling values are left out."""
    payload: dict[str, Any] = {
        "model": options.model,
        "prompt": prompt if options.raw else format_prompt(options.system, prompt),
        "max_tokens_to_sample": options.max_tokens,
        "stream": options.stream,
    }

    if _is_set(options.temperature):
        payload["temperature"] = options.temperature
    if _is_set(options.top_p):
        payload["top_p"] = options.top_p

    return payload


def serialize_request(payload: dict[str, Any]) -> bytes:
    """Encode the payload as a JSON request body."""
    try:
        return json.dumps(payload, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise TransportError(f"can't marshal args: {e}", step="serialize") from e
