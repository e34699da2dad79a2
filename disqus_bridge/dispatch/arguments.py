"""
Call Argument Classification

Every public API method accepts a trailing, optional success callback,
failure callback and options mapping, in any combination. CallShape holds
the three slots by name; classify() fills them from a loose argument list.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

SuccessCallback = Callable[..., Any]
FailureCallback = Callable[[Any], Any]


@dataclass
class CallShape:
    """
    The callbacks and options of one API call.

    Can be passed directly as a call argument instead of loose callables:

        forum.get_thread_list(CallShape(on_success=show, options={"limit": 5}))
    """

    on_success: SuccessCallback | None = None
    on_failure: FailureCallback | None = None
    options: Mapping[str, Any] | None = None

    def succeed(self, *result: Any) -> None:
        """Invoke the success callback, if any, with result."""
        if self.on_success is not None:
            self.on_success(*result)

    def fail(self, code: Any) -> None:
        """Invoke the failure callback, if any, with the failure code."""
        if self.on_failure is not None:
            self.on_failure(code)


def classify(args: Iterable[Any]) -> CallShape:
    """
    Split a call's arguments into success callback, failure callback and options.

    The first callable is the success callback and the second the failure
    callback; further callables are dropped. The first mapping is the
    options; further mappings are dropped. Anything else is ignored. A
    CallShape argument fills whichever of its slots are still empty.

    Example:
        >>> classify([print, {"limit": 5}])
        CallShape(on_success=<built-in function print>, on_failure=None, options={'limit': 5})
    """
    shape = CallShape()

    for arg in args:
        if isinstance(arg, CallShape):
            if shape.on_success is None:
                shape.on_success = arg.on_success
            if shape.on_failure is None:
                shape.on_failure = arg.on_failure
            if shape.options is None:
                shape.options = arg.options
        elif callable(arg):
            if shape.on_success is None:
                shape.on_success = arg
            elif shape.on_failure is None:
                shape.on_failure = arg
        elif isinstance(arg, Mapping):
            if shape.options is None:
                shape.options = arg

    return shape
