"""
Request Channels

Two ways of reaching the API from a client that cannot read ordinary
cross-origin responses:

ReadableChannel
    GET with ``api_response_format=jsonp:<handler>``. The response body
    invokes the registered handler with ``{"succeeded": ..., "message": ...}``
    or ``{"succeeded": false, "code": ...}``, which is routed back to the
    caller's callbacks.

WriteOnlyChannel
    Form POST into a hidden SubmissionSurface. Some API methods only
    accept form submissions, and their responses cannot be read. The only
    observable event is that the surface finished loading, so the success
    callback is called with no data and the failure callback never.

Both return to the caller as soon as the request is handed to the
transport.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

import structlog

from ..config import DisqusSettings
from ..transport.base import (
    ScriptRequest,
    SubmissionSurface,
    SurfaceHost,
    Transport,
    stringify_params,
)
from .arguments import classify
from .correlator import Correlator, PendingCall

logger = structlog.get_logger(__name__)

LogSink = Callable[[str], None]
ResultTransform = Callable[[Any], Any]

# Response format for submissions whose response nobody reads
VOID_RESPONSE_FORMAT = "jsonp:void"


def _discard(message: str) -> None:
    pass


def merge_params(
    protocol: Mapping[str, Any],
    params: Mapping[str, Any],
    options: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Protocol metadata, then fixed params, then caller options; later keys win."""
    merged = dict(protocol)
    merged.update(params)
    if options:
        merged.update(options)
    return merged


class ReadableChannel:
    """GET-style calls whose result is delivered to a registered handler."""

    def __init__(
        self,
        correlator: Correlator,
        transport: Transport,
        settings: DisqusSettings,
        sink: LogSink = _discard,
    ) -> None:
        self.correlator = correlator
        self.transport = transport
        self.settings = settings
        self._sink = sink

    def get(
        self,
        call_args: Iterable[Any],
        method: str,
        params: Mapping[str, Any],
        transform: ResultTransform | None = None,
    ) -> PendingCall:
        """
        Issue a read call.

        Args:
            call_args: The caller's loose arguments (callbacks and options)
            method: API method name
            params: Fixed parameters; caller options override them
            transform: Applied to the success payload before the success callback

        Returns:
            The pending call. It settles when the transport delivers a
            response, and never otherwise.
        """
        shape = classify(call_args)
        call = self.correlator.begin_call(method)
        sink = self._sink

        def on_response(response: dict[str, Any]) -> None:
            succeeded = bool(response.get("succeeded"))
            if succeeded:
                sink(f"{method} ({call.call_id}) succeeded")
                logger.debug("api_call_succeeded", method=method, call_id=call.call_id)
                if shape.on_success is not None:
                    message = response.get("message")
                    shape.on_success(transform(message) if transform else message)
            else:
                code = response.get("code")
                sink(f"{method} ({call.call_id}) failed ({code})")
                logger.info("api_call_failed", method=method, call_id=call.call_id, code=code)
                shape.fail(code)

        self.correlator.register_handler(call, on_response)

        sink(f"Invoking {method} ({call.call_id})")
        logger.debug("api_call_started", method=method, call_id=call.call_id, channel="readable")

        protocol = {
            "api_version": self.settings.api_version,
            "api_response_format": f"jsonp:{call.handler_name}",
        }
        request = ScriptRequest(
            url=self.settings.method_url(method),
            params=stringify_params(merge_params(protocol, params, shape.options)),
            handler_name=call.handler_name,
            call_id=call.call_id,
        )
        try:
            self.transport.fetch_script(request, self.correlator.deliver)
        except Exception:
            self.correlator.discard(call.call_id)
            raise
        return call


class WriteOnlyChannel:
    """POST-style calls that can signal completion but not deliver data."""

    def __init__(
        self,
        correlator: Correlator,
        transport: Transport,
        settings: DisqusSettings,
        host: SurfaceHost,
        sink: LogSink = _discard,
    ) -> None:
        self.correlator = correlator
        self.transport = transport
        self.settings = settings
        self.host = host
        self._sink = sink

    def post(
        self,
        call_args: Iterable[Any],
        method: str,
        params: Mapping[str, Any],
    ) -> SubmissionSurface:
        """
        Issue a write call through a hidden form submission.

        The surface is attached to the host until its target has loaded;
        then it is detached and the success callback, if any, is called
        with no arguments.
        """
        shape = classify(call_args)
        call = self.correlator.begin_call(method)
        sink = self._sink

        protocol = {
            "api_version": self.settings.api_version,
            "api_response_format": VOID_RESPONSE_FORMAT,
        }
        surface = SubmissionSurface(
            target_name=f"_target{call.call_id}",
            action=self.settings.method_url(method),
            fields=stringify_params(merge_params(protocol, params, shape.options)),
            call_id=call.call_id,
        )

        def finish() -> None:
            sink(f"{method} ({call.call_id}) done")
            logger.debug("write_call_done", method=method, call_id=call.call_id)
            self.host.detach(surface)
            call.settled = True
            shape.succeed()

        # Let whatever the target loaded run before tearing the surface down
        surface.on_load = lambda: self.transport.defer(finish)

        self.host.attach(surface)

        sink(f"Invoking {method} ({call.call_id})")
        logger.debug("api_call_started", method=method, call_id=call.call_id, channel="write_only")

        try:
            self.transport.submit_form(surface)
        except Exception:
            self.host.detach(surface)
            raise
        return surface
