"""
HTTP Transport

Carries script fetches and form submissions over httpx on the running
asyncio event loop. Each request becomes a task; issuing it returns at
once and the result is delivered from the task.

A request that fails at the transport level (connection refused, an
unparsable body) is logged and never delivered, which leaves its call
pending. There is no retry and no timeout beyond the HTTP
client's own.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

import httpx
import structlog

from ..config import DisqusSettings, get_settings
from ..exceptions import MalformedResponseError, TransportUnavailableError
from .base import Deliver, ScriptRequest, SubmissionSurface, parse_script_response

logger = structlog.get_logger(__name__)


class HttpxTransport:
    """Transport backed by an httpx.AsyncClient."""

    def __init__(
        self,
        settings: DisqusSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            settings: Optional configuration. Uses global settings if not provided.
            http_client: Optional client to use instead of creating one
                         (e.g. one built on httpx.MockTransport in tests)
        """
        self.settings = settings or get_settings()
        self._http_client = http_client
        self._owns_client = http_client is None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.request_timeout),
                follow_redirects=True,
            )
        return self._http_client

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def _loop(self) -> asyncio.AbstractEventLoop:
        try:
            return asyncio.get_running_loop()
        except RuntimeError as e:
            raise TransportUnavailableError(
                "HttpxTransport needs a running asyncio event loop"
            ) from e

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        try:
            loop = self._loop()
        except TransportUnavailableError:
            coro.close()
            raise
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # ==================== Transport protocol ====================

    def fetch_script(self, request: ScriptRequest, deliver: Deliver) -> None:
        self._spawn(self._fetch_script(request, deliver))

    def submit_form(self, surface: SubmissionSurface) -> None:
        self._spawn(self._submit_form(surface))

    def defer(self, fn: Callable[[], None]) -> None:
        self._loop().call_soon(fn)

    # ==================== Tasks ====================

    async def _fetch_script(self, request: ScriptRequest, deliver: Deliver) -> None:
        try:
            response = await self.http_client.get(request.url, params=request.params)
            handler_name, payload = parse_script_response(response.text)
        except httpx.HTTPError as e:
            logger.warning("script_fetch_failed", url=request.url, call_id=request.call_id, error=str(e))
            return
        except MalformedResponseError as e:
            logger.error(
                "script_response_malformed",
                url=request.url,
                call_id=request.call_id,
                status_code=response.status_code,
                error=str(e),
            )
            return

        if handler_name != request.handler_name:
            logger.warning(
                "script_response_misaddressed",
                expected=request.handler_name,
                received=handler_name,
            )

        try:
            deliver(handler_name, payload)
        except Exception as e:
            logger.error(
                "response_handler_error",
                handler_name=handler_name,
                call_id=request.call_id,
                error=str(e),
                exc_info=True,
            )

    async def _submit_form(self, surface: SubmissionSurface) -> None:
        try:
            # The response is never inspected; any HTTP status counts as loaded
            await self.http_client.post(surface.action, data=surface.fields)
        except httpx.HTTPError as e:
            logger.warning(
                "form_submit_failed", action=surface.action, call_id=surface.call_id, error=str(e)
            )
            return
        surface.load()

    # ==================== Lifecycle ====================

    async def drain(self) -> None:
        """Wait for every request issued so far (and any they issue) to finish."""
        while True:
            if self._tasks:
                await asyncio.gather(*list(self._tasks))
            # Completions scheduled with defer() run on the following tick
            await asyncio.sleep(0)
            if not self._tasks:
                return

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
        self._http_client = None
