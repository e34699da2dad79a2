"""
Transport Protocol

The dispatch layer never talks HTTP directly. It hands a transport one of
two kinds of work:

1. A script fetch: GET a resource whose body is an invocation of a named
   handler with a JSON object, e.g. ``disqus._handler3({"succeeded": true})``.
   The transport parses the body and calls ``deliver(name, payload)``.
2. A form submission: POST the fields of a hidden SubmissionSurface. The
   response is never read; the transport only reports that the surface
   finished loading by calling ``surface.load()``.

It also provides ``defer()``, which runs a callable on the next scheduling
tick.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from ..exceptions import MalformedResponseError
from ..models.base import format_date

Deliver = Callable[[str, dict[str, Any]], bool]

# name(payload) with an optional trailing semicolon
_INVOCATION = re.compile(r"^\s*([A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)\s*\((.*)\)\s*;?\s*$", re.DOTALL)


@dataclass(frozen=True)
class ScriptRequest:
    """A GET whose response invokes handler_name."""

    url: str
    params: dict[str, str]
    handler_name: str
    call_id: int


@dataclass
class SubmissionSurface:
    """
    Hidden form plus the target that receives its response.

    on_load is set by the write-only channel and fires at most once.
    """

    target_name: str
    action: str
    fields: dict[str, str]
    call_id: int
    on_load: Callable[[], None] | None = None
    loaded: bool = field(default=False, compare=False)

    def load(self) -> bool:
        """Signal that the target finished loading. Returns False on repeat loads."""
        if self.loaded:
            return False
        self.loaded = True
        if self.on_load is not None:
            self.on_load()
        return True


class SurfaceHost:
    """Holds the submission surfaces currently attached, keyed by target name."""

    def __init__(self) -> None:
        self._surfaces: dict[str, SubmissionSurface] = {}

    def attach(self, surface: SubmissionSurface) -> None:
        self._surfaces[surface.target_name] = surface

    def detach(self, surface: SubmissionSurface) -> bool:
        return self._surfaces.pop(surface.target_name, None) is not None

    def get(self, target_name: str) -> SubmissionSurface | None:
        return self._surfaces.get(target_name)

    def __contains__(self, target_name: object) -> bool:
        return target_name in self._surfaces

    def __len__(self) -> int:
        return len(self._surfaces)


@runtime_checkable
class Transport(Protocol):
    """What the channels need from the outside world."""

    def fetch_script(self, request: ScriptRequest, deliver: Deliver) -> None:
        """Issue request; later call deliver(handler_name, payload)."""
        ...

    def submit_form(self, surface: SubmissionSurface) -> None:
        """Submit surface.fields to surface.action; later call surface.load()."""
        ...

    def defer(self, fn: Callable[[], None]) -> None:
        """Run fn on the next scheduling tick."""
        ...


def parse_script_response(body: str) -> tuple[str, dict[str, Any]]:
    """
    Parse a handler invocation into (handler name, payload).

    Raises:
        MalformedResponseError: If body is not ``name({...})``
    """
    match = _INVOCATION.match(body)
    if match is None:
        raise MalformedResponseError(f"Response is not a handler invocation: {body[:80]!r}")

    name, argument = match.groups()
    try:
        payload = json.loads(argument)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Handler argument is not JSON: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedResponseError(
            f"Handler argument must be an object, got {type(payload).__name__}"
        )
    return name, payload


def stringify(value: Any) -> str:
    """Serialize one parameter value the way the API expects it on the wire."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return format_date(value)
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(v) for v in value)
    return str(value)


def stringify_params(params: Mapping[str, Any]) -> dict[str, str]:
    return {str(key): stringify(value) for key, value in params.items()}
