"""
Transport Package

The Transport protocol the request channels are written against, the
submission surfaces used by write-only calls, and the httpx-backed
implementation.
"""

from .base import (
    Deliver,
    ScriptRequest,
    SubmissionSurface,
    SurfaceHost,
    Transport,
    parse_script_response,
    stringify,
    stringify_params,
)
from .http import HttpxTransport

__all__ = [
    "Transport",
    "Deliver",
    "ScriptRequest",
    "SubmissionSurface",
    "SurfaceHost",
    "HttpxTransport",
    "parse_script_response",
    "stringify",
    "stringify_params",
]
