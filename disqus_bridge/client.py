"""
Disqus API Client

Entry point for application code. The client owns the dispatch machinery
(correlator, channels, credential gate), the user API key and the
optional log sink, and hands out Forum / Thread / Post records bound to
itself.

Calls return immediately and report through callbacks:

    client = DisqusClient().set_user_key(user_key)

    def on_forums(forums):
        for forum in forums:
            forum.get_thread_by_url(page_url, on_thread, on_error)

    client.get_forum_list(on_forums, on_error)

With the default httpx transport, calls must be made while an asyncio
event loop is running; await ``client.drain()`` to wait for everything
issued so far.
"""

from collections.abc import Iterable
from typing import Any

import structlog

from .config import USER_KEY_URL, DisqusSettings, get_settings
from .dispatch.channels import LogSink, ReadableChannel, WriteOnlyChannel
from .dispatch.correlator import Correlator
from .dispatch.gate import CredentialGate
from .models.entities import Forum, Post, Thread
from .models.shaping import list_transform
from .transport.base import SurfaceHost, Transport
from .transport.http import HttpxTransport

logger = structlog.get_logger(__name__)


def _noop_sink(message: str) -> None:
    pass


class DisqusClient:
    """
    Client for the Disqus 1.1 API.

    Every API method takes a trailing, optional success callback, failure
    callback and options mapping, and returns the client for chaining.
    """

    user_key_url = USER_KEY_URL

    def __init__(
        self,
        settings: DisqusSettings | None = None,
        transport: Transport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Optional configuration. Uses global settings if not provided.
            transport: Optional transport. Defaults to HttpxTransport.
        """
        self.settings = settings or get_settings()
        self.transport: Transport = transport or HttpxTransport(self.settings)
        self.user_key: str | None = self.settings.user_api_key
        self._sink: LogSink = _noop_sink

        self.correlator = Correlator(namespace=self.settings.handler_namespace)
        self.surfaces = SurfaceHost()
        self.readable = ReadableChannel(
            self.correlator, self.transport, self.settings, sink=self._log
        )
        self.write_only = WriteOnlyChannel(
            self.correlator, self.transport, self.settings, self.surfaces, sink=self._log
        )
        self.gate = CredentialGate()

    def _log(self, message: str) -> None:
        self._sink(message)

    # ==================== Configuration ====================

    def set_logger(self, log_fn: LogSink | None) -> "DisqusClient":
        """Send a human-readable line per call start and completion to log_fn."""
        self._sink = log_fn or _noop_sink
        return self

    def set_user_key(self, user_key: str) -> "DisqusClient":
        """Set the user API key used by every subsequent call."""
        self.user_key = user_key
        logger.debug("user_key_set")
        return self

    # ==================== Records ====================

    def forum(self, forum_id: int | str, **fields: Any) -> Forum:
        """A Forum record bound to this client, for a forum whose id is known."""
        forum = Forum(id=forum_id, **fields)
        forum.bind(self)
        return forum

    def thread(self, thread_id: int | str, forum: Forum | None = None, **fields: Any) -> Thread:
        """A Thread record bound to this client (and to forum, if given)."""
        thread = Thread(id=thread_id, **fields)
        thread.bind(self, forum=forum)
        return thread

    def post(self, post_id: int | str, **fields: Any) -> Post:
        """A Post record bound to this client."""
        post = Post(id=post_id, **fields)
        post.bind(self)
        return post

    # ==================== Global API methods ====================

    def get_user_name(self, *args: Any) -> "DisqusClient":
        """
        Ask for the user name belonging to the user key.

        Only available as a form submission, so the name cannot be read:
        the success callback is called with no arguments.
        """
        self.write_only.post(args, "get_user_name", {"user_api_key": self.user_key})
        return self

    def get_forum_list(self, *args: Any) -> "DisqusClient":
        """Get the forums the user owns as a list of Forum."""
        self.readable.get(
            args,
            "get_forum_list",
            {"user_api_key": self.user_key},
            list_transform(Forum, self),
        )
        return self

    def get_num_posts(
        self, thread_ids: int | str | Iterable[int | str], *args: Any
    ) -> "DisqusClient":
        """
        Get post counts for one thread id or several.

        The success callback receives the raw mapping of thread id to
        [visible posts, total posts].
        """
        if isinstance(thread_ids, (int, str)):
            thread_ids = [thread_ids]
        self.readable.get(
            args,
            "get_num_posts",
            {"user_api_key": self.user_key, "thread_ids": list(thread_ids)},
        )
        return self

    # ==================== Lifecycle ====================

    @property
    def pending_count(self) -> int:
        """Read calls still waiting for a response."""
        return self.correlator.pending_count

    async def drain(self) -> None:
        """Wait for in-flight requests, when the transport supports it."""
        drain = getattr(self.transport, "drain", None)
        if drain is not None:
            await drain()

    async def aclose(self) -> None:
        """Release transport resources."""
        aclose = getattr(self.transport, "aclose", None)
        if aclose is not None:
            await aclose()

    async def __aenter__(self) -> "DisqusClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


# Global client instance
_client: DisqusClient | None = None


def get_client() -> DisqusClient:
    """
    Get the process-wide client.

    Created from the global settings on first use.
    """
    global _client
    if _client is None:
        _client = DisqusClient()
    return _client


def configure_client(client: DisqusClient | None) -> None:
    """
    Replace the process-wide client.

    Useful for testing; passing None makes the next get_client() build a
    fresh one.
    """
    global _client
    _client = client
