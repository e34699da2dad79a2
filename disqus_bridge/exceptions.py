"""
Disqus Bridge Exceptions

Remote failures are never raised: they travel to the caller's failure
callback as the API's error code. The exceptions below cover misuse of
the client and responses the transport cannot interpret.
"""


class DisqusError(Exception):
    """Base exception for disqus-bridge errors."""
    pass


class TransportUnavailableError(DisqusError):
    """Raised when a request is issued with no event loop to carry it."""
    pass


class MalformedResponseError(DisqusError):
    """Raised when a response body is not a handler invocation with a JSON object."""
    pass


class UnboundEntityError(DisqusError):
    """Raised when an entity method needs a client or forum it was never bound to."""
    pass
