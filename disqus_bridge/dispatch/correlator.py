"""
Call Correlation

Every outbound call gets a correlation id from a counter that only ever
grows. Read calls register a one-shot response handler under that id; the
remote side is told the handler's name and the transport hands that name
back together with the payload.

Handlers are kept in a mapping owned by the Correlator, never in a shared
namespace. A handler is removed before it runs, so a duplicate or stale
delivery finds nothing to invoke.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

ResponseHandler = Callable[[dict[str, Any]], None]


@dataclass
class PendingCall:
    """
    Handle for one in-flight call.

    There is no timeout and no cancellation: if the transport never
    delivers, the call stays unsettled for the life of the process.
    """

    call_id: int
    handler_name: str
    method: str
    settled: bool = field(default=False, compare=False)


class Correlator:
    """Issues correlation ids and routes responses to their one-shot handlers."""

    def __init__(self, namespace: str = "disqus") -> None:
        self.namespace = namespace
        self._counter = itertools.count(1)
        self._handlers: dict[int, tuple[PendingCall, ResponseHandler]] = {}
        self._ids_by_name: dict[str, int] = {}

    def handler_name(self, call_id: int) -> str:
        """Name the remote side must invoke to reach the handler for call_id."""
        return f"{self.namespace}._handler{call_id}"

    def begin_call(self, method: str) -> PendingCall:
        """Allocate the next correlation id."""
        call_id = next(self._counter)
        return PendingCall(call_id=call_id, handler_name=self.handler_name(call_id), method=method)

    def register_handler(self, call: PendingCall, on_response: ResponseHandler) -> None:
        """Store the one-shot handler for call."""
        if call.call_id in self._handlers:
            raise ValueError(f"Handler already registered for call {call.call_id}")
        self._handlers[call.call_id] = (call, on_response)
        self._ids_by_name[call.handler_name] = call.call_id

    def invoke(self, call_id: int, response: dict[str, Any]) -> bool:
        """
        Run the handler registered for call_id.

        The handler is deregistered before it runs. Returns False when no
        handler is registered (already delivered, or never issued).
        """
        entry = self._handlers.pop(call_id, None)
        if entry is None:
            logger.debug("response_without_handler", call_id=call_id)
            return False

        call, on_response = entry
        self._ids_by_name.pop(call.handler_name, None)
        call.settled = True
        on_response(response)
        return True

    def deliver(self, handler_name: str, response: dict[str, Any]) -> bool:
        """Route a response addressed to handler_name."""
        call_id = self._ids_by_name.get(handler_name)
        if call_id is None:
            logger.debug("response_for_unknown_handler", handler_name=handler_name)
            return False
        return self.invoke(call_id, response)

    def discard(self, call_id: int) -> bool:
        """Drop the handler for a call that was never sent. Returns False if none was registered."""
        entry = self._handlers.pop(call_id, None)
        if entry is None:
            return False
        self._ids_by_name.pop(entry[0].handler_name, None)
        return True

    def is_registered(self, call_id: int) -> bool:
        return call_id in self._handlers

    def pending_ids(self) -> list[int]:
        """Ids of calls still waiting for a response, oldest first."""
        return sorted(self._handlers)

    @property
    def pending_count(self) -> int:
        return len(self._handlers)
