"""A single request/response exchange with a completions endpoint.

This module hides how the exchange is carried out:
- HTTP transport and connection release (httpx)
- Incremental line consumption of the event stream
- Accumulation and sanitization of content fragments
- Cooperative cancellation and the overall deadline

Usage:
    session = StreamSession()
    async for event in session.start(spec):
        ...
    # From another task, at any time:
    session.cancel()
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from typing import TypeVar

import httpx
from pydantic import ValidationError

from ..config import NO_RESPONSE_TEXT, PACING_DELAY_SECONDS, REQUEST_TIMEOUT_SECONDS
from .errors import (
    ChatError,
    DecodingError,
    RequestTimeoutError,
    ServerError,
    TransportError,
)
from .models import (
    CompletionResponse,
    Delta,
    Failed,
    FirstToken,
    RequestSpec,
    SessionEvent,
    Settled,
)
from .parser import parse_line
from .sanitizer import clean

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionCancelled(Exception):
    """Internal signal: the session was cancelled at a suspension point."""


class StreamSession:
    """Owns exactly one chat-completion exchange.

    Failures never escape ``start``; they are published as a ``Failed``
    event. After ``cancel`` the session publishes nothing further.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        pacing_delay: float = PACING_DELAY_SECONDS,
    ):
        """Initialize a session.

        Args:
            http_client: Client to send the request with. When omitted the
                session creates one and closes it when the exchange ends.
            timeout: Upper bound in seconds on the whole exchange
            pacing_delay: Pause in seconds after each published delta
        """
        self._client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout
        self._pacing_delay = pacing_delay
        self._cancelled = asyncio.Event()
        self._started = False
        self._deadline = 0.0
        self._accumulated: list[str] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def accumulated_text(self) -> str:
        """Raw text received so far, before sanitization."""
        return "".join(self._accumulated)

    def cancel(self) -> None:
        """Stop the exchange at its next suspension point."""
        if not self._cancelled.is_set():
            logger.debug("Session cancel requested")
        self._cancelled.set()

    async def start(self, spec: RequestSpec) -> AsyncIterator[SessionEvent]:
        """Run the exchange, yielding events as they happen.

        Args:
            spec: Request configuration

        Yields:
            ``FirstToken``, ``Delta`` and ``Settled`` events on success, or a
            single ``Failed`` event on a terminal error

        Raises:
            RuntimeError: If the session was already started
        """
        if self._started:
            raise RuntimeError("A StreamSession can only be started once")
        self._started = True
        self._deadline = asyncio.get_running_loop().time() + self._timeout

        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))

        try:
            async with aclosing(self._run(spec)) as events:
                async for event in events:
                    if self.cancelled:
                        raise SessionCancelled()
                    yield event
        except SessionCancelled:
            logger.info("Session cancelled")
        except ChatError as e:
            logger.warning("Chat request failed: %s", e.description)
            if not self.cancelled:
                yield Failed(e)
        finally:
            if self._owns_client:
                await self._client.aclose()

    async def _run(self, spec: RequestSpec) -> AsyncIterator[SessionEvent]:
        url = spec.endpoint_url()
        request = self._client.build_request(
            "POST", url, headers=spec.headers(), json=spec.payload()
        )
        logger.debug(
            "POST %s (model=%s, stream=%s)", url, spec.model_identifier, spec.streaming_enabled
        )

        response = await self._suspend(lambda: self._client.send(request, stream=True))
        try:
            logger.debug("Response status %s", response.status_code)
            if response.status_code != 200:
                raise ServerError(response.status_code)

            if spec.streaming_enabled:
                async with aclosing(self._stream_events(response)) as events:
                    async for event in events:
                        yield event
            else:
                body = await self._suspend(response.aread)
                yield Settled(self._decode_completion(body), streamed=False)
        finally:
            await response.aclose()

    async def _stream_events(self, response: httpx.Response) -> AsyncIterator[SessionEvent]:
        lines = response.aiter_lines()
        try:
            while True:
                line = await self._suspend(lambda: anext(lines, None))
                if line is None:
                    # Connection closed without a sentinel
                    break

                delta = parse_line(line)
                if delta is None:
                    continue
                if delta.is_terminal:
                    break
                if delta.content_fragment is None:
                    continue

                if not self._accumulated:
                    yield FirstToken()
                self._accumulated.append(delta.content_fragment)
                yield Delta(clean(self.accumulated_text))

                if self._pacing_delay > 0:
                    await self._suspend(lambda: asyncio.sleep(self._pacing_delay))
        finally:
            await lines.aclose()

        logger.debug("Stream settled after %d fragment(s)", len(self._accumulated))
        yield Settled(clean(self.accumulated_text), streamed=True)

    @staticmethod
    def _decode_completion(body: bytes) -> str:
        try:
            completion = CompletionResponse.model_validate_json(body)
        except ValidationError as e:
            raise DecodingError() from e

        if not completion.choices:
            return NO_RESPONSE_TEXT
        return completion.choices[0].message.content or ""

    @staticmethod
    async def _translated(awaitable: Awaitable[T]) -> T:
        """Await an httpx operation, mapping its errors onto ChatError."""
        try:
            return await awaitable
        except httpx.TimeoutException as e:
            raise RequestTimeoutError() from e
        except httpx.DecodingError as e:
            raise DecodingError() from e
        except httpx.TransportError as e:
            raise TransportError(f"Could not reach the server: {e}") from e
        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {e}") from e

    async def _suspend(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run *operation* unless cancellation or the deadline comes first.

        Raises:
            SessionCancelled: If the session is cancelled before completion
            RequestTimeoutError: If the overall deadline passes first
        """
        if self.cancelled:
            raise SessionCancelled()

        remaining = self._deadline - asyncio.get_running_loop().time()
        task = asyncio.ensure_future(self._translated(operation()))
        waiter = asyncio.ensure_future(self._cancelled.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=max(remaining, 0),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            # The operation may still hold the line iterator
            task.cancel()
            await asyncio.wait({task})
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.wait({task})
        if not task.cancelled():
            task.exception()
        if self.cancelled:
            raise SessionCancelled()
        raise RequestTimeoutError()
