"""
HTTP transport for the completion API.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog

from .exceptions import TransportError

logger = structlog.get_logger(__name__)


class CompletionClient:
    """HTTP client that opens streaming completion responses."""

    def __init__(
        self,
        api_config: dict[str, Any],
        api_key: str,
        http_config: dict[str, Any] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        required_keys = ["base_url", "completion_path", "version"]
        for key in required_keys:
            if key not in api_config:
                raise ValueError(
                    f"Required API configuration parameter '{key}' not found."
                )

        http_config = http_config or {}
        self.completion_path: str = api_config["completion_path"]
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=api_config["base_url"],
            headers={
                "accept": "application/json",
                "anthropic-version": api_config["version"],
                "content-type": "application/json",
                "x-api-key": api_key,
            },
            timeout=httpx.Timeout(
                connect=http_config.get("connect_timeout"),
                read=http_config.get("read_timeout"),
                write=http_config.get("write_timeout"),
                pool=http_config.get("pool_timeout"),
            ),
            transport=transport,
        )

    @asynccontextmanager
    async def open_stream(self, body: bytes) -> AsyncIterator[httpx.Response]:
        """
        POST the request body and yield the response with an unread body.

        The response is closed exactly once when the block exits, whatever
        the outcome.
        """
        try:
            request = self.client.build_request(
                "POST", self.completion_path, content=body
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise TransportError(f"NewRequest: {e}", step="build_request") from e

        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise TransportError(f"POST: {e}", step="send") from e

        logger.debug(
            "Response received", status_code=response.status_code,
            content_type=response.headers.get("content-type", ""),
        )
        try:
            yield response
        finally:
            await response.aclose()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> CompletionClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
