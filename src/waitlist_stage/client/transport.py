"""Transports the counter view uses to reach the counter service.

``fetch_count`` polls ``GET /api/v1/count`` over httpx; ``connect`` opens the
``/api/v1/ws/count`` websocket and yields counts as they arrive.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol
from urllib.parse import urlsplit, urlunsplit

import httpx
import websockets
from pydantic import ValidationError
from websockets.exceptions import WebSocketException

from waitlist_stage.schemas.realtime import GET_COUNT, CountUpdateMessage
from waitlist_stage.schemas.signup import CountResponse
from waitlist_stage.services.errors import WaitlistError

# Configure logger for this module
logger = logging.getLogger(__name__)

COUNT_PATH = "/api/v1/count"
STREAM_PATH = "/api/v1/ws/count"


class CounterSourceError(WaitlistError):
    """Raised when the counter service cannot be reached."""


class CountStream(Protocol):
    """Live sequence of counts from an open realtime connection."""

    def __aiter__(self) -> AsyncIterator[int]: ...

    async def request_count(self) -> None: ...


class CounterSource(Protocol):
    """Where a counter view gets its numbers from."""

    async def fetch_count(self) -> int: ...

    def connect(self) -> AbstractAsyncContextManager[CountStream]: ...


def websocket_url(base_url: str, path: str = STREAM_PATH) -> str:
    """Translate an ``http(s)`` base URL into the matching ``ws(s)`` endpoint."""
    parts = urlsplit(base_url)
    scheme = {"http": "ws", "https": "wss"}.get(parts.scheme, parts.scheme)
    full_path = parts.path.rstrip("/") + path
    return urlunsplit((scheme, parts.netloc, full_path, "", ""))


class WebSocketCountStream:
    """Counts read from a ``websockets`` client connection."""

    def __init__(self, connection: websockets.ClientConnection) -> None:
        self._connection = connection

    async def request_count(self) -> None:
        """Ask the server for an immediate ``count_update``."""
        await self._connection.send(json.dumps({"type": GET_COUNT}))

    async def __aiter__(self) -> AsyncIterator[int]:
        async for raw in self._connection:
            try:
                message = CountUpdateMessage.model_validate_json(raw)
            except ValidationError:
                logger.warning("Ignoring unexpected realtime message: %r", raw)
                continue
            yield message.count


class HttpCounterSource:
    """Counter source talking to a running Waitlist Stage server."""

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)
        self._timeout = timeout

    async def fetch_count(self) -> int:
        """Return the current count from ``GET /api/v1/count``.

        Raises:
            CounterSourceError: If the request fails or the body is unexpected
        """
        try:
            response = await self._client.get(COUNT_PATH)
            response.raise_for_status()
            return CountResponse.model_validate(response.json()).count
        except httpx.HTTPError as exc:
            raise CounterSourceError(f"Count request failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise CounterSourceError("Count response was not understood") from exc

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[WebSocketCountStream]:
        """Open the realtime channel.

        Raises:
            CounterSourceError: If the socket cannot be opened or drops
        """
        url = websocket_url(self.base_url)
        try:
            async with websockets.connect(
                url,
                open_timeout=self._timeout,
                close_timeout=5,
                ping_interval=20,
                ping_timeout=20,
            ) as connection:
                logger.info("Connected to count stream at %s", url)
                yield WebSocketCountStream(connection)
        except (OSError, WebSocketException) as exc:
            raise CounterSourceError(f"Count stream unavailable: {exc}") from exc

    async def aclose(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._owns_client:
            await self._client.aclose()
