"""
disqus-bridge

Client binding for the Disqus 1.1 comment API with callback-based result
delivery: JSONP-style read calls routed back by correlation id, form
submissions for write-only methods, and a gate that fetches a forum's API
key before the calls that need it.
"""

__version__ = "0.1.0"

from .client import DisqusClient, configure_client, get_client
from .config import USER_KEY_URL, DisqusSettings, configure_settings, get_settings
from .dispatch import CallShape, classify
from .exceptions import (
    DisqusError,
    MalformedResponseError,
    TransportUnavailableError,
    UnboundEntityError,
)
from .models import Category, Forum, ModerationAction, Post, Thread

__all__ = [
    "__version__",
    # Client
    "DisqusClient",
    "get_client",
    "configure_client",
    # Configuration
    "DisqusSettings",
    "get_settings",
    "configure_settings",
    "USER_KEY_URL",
    # Call shape
    "CallShape",
    "classify",
    # Records
    "Forum",
    "Category",
    "Thread",
    "Post",
    "ModerationAction",
    # Exceptions
    "DisqusError",
    "MalformedResponseError",
    "TransportUnavailableError",
    "UnboundEntityError",
]
