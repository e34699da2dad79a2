"""
Disqus Entities

Forum, Category, Thread and Post records. Besides carrying the API's
fields, each record exposes the API methods scoped to it. Every method
takes a trailing, optional success callback, failure callback and options
mapping (see dispatch.arguments.classify) and returns the record itself
before the call has completed:

    def show(threads):
        for thread in threads:
            print(thread.title, thread.created_at)

    forum.get_thread_list(show, report_error, {"limit": 10})
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

import structlog
from pydantic import PrivateAttr, field_validator

from ..exceptions import UnboundEntityError
from .base import DisqusModel, format_date, parse_timestamp
from .shaping import list_transform, record_transform

logger = structlog.get_logger(__name__)


class ModerationAction(str, Enum):
    """Actions accepted by moderate_post."""

    SPAM = "spam"
    APPROVE = "approve"
    KILL = "kill"


class TimestampedModel(DisqusModel):
    """Record with a created_at timestamp sent as a string."""

    created_at: datetime | None = None

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, v: Any) -> datetime | None:
        # An unreadable date must not stop the record from reaching its callback
        try:
            return parse_timestamp(v)
        except ValueError as e:
            logger.warning("created_at_unparsed", model=cls.__name__, value=v, error=str(e))
            return None


class Forum(TimestampedModel):
    """
    A Disqus forum (website).

    api_key is the forum-scoped credential. It is absent until a gated
    call fetches it and then kept for the life of the instance.
    """

    api_key: str | None = None

    _credential_waiters: list[Any] = PrivateAttr(default_factory=list)

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)

    def get_forum_api_key(self, *args: Any) -> Forum:
        """Get the API key for this forum; the success callback receives it."""
        client = self.client
        client.readable.get(
            args,
            "get_forum_api_key",
            {"user_api_key": client.user_key, "forum_id": self.id},
        )
        return self

    def get_forum_posts(self, *args: Any) -> Forum:
        """
        Get the latest posts of this forum as a list of Post.

        Options:
            category_id: Filter entries by category
            limit: Number of entries in the response (server default 25)
            start: Starting point for the query (server default 0)
            filter: Type of entries that should be returned
            exclude: Type of entries that should be excluded
        """
        client = self.client
        client.readable.get(
            args,
            "get_forum_posts",
            {"user_api_key": client.user_key, "forum_id": self.id},
            list_transform(Post, client, forum=self),
        )
        return self

    def get_categories_list(self, *args: Any) -> Forum:
        """Get the categories of this forum as a list of Category."""
        client = self.client
        client.readable.get(
            args,
            "get_categories_list",
            {"user_api_key": client.user_key, "forum_id": self.id},
            list_transform(Category, client, forum=self),
        )
        return self

    def get_thread_list(self, *args: Any) -> Forum:
        """
        Get the threads of this forum as a list of Thread.

        Options:
            category_id: Filter entries by category
        """
        client = self.client
        client.readable.get(
            args,
            "get_thread_list",
            {"user_api_key": client.user_key, "forum_id": self.id},
            list_transform(Thread, client, forum=self),
        )
        return self

    def get_updated_threads(self, since: datetime, *args: Any) -> Forum:
        """Get the threads updated since the given time as a list of Thread."""
        client = self.client
        client.readable.get(
            args,
            "get_updated_threads",
            {"user_api_key": client.user_key, "forum_id": self.id, "since": format_date(since)},
            list_transform(Thread, client, forum=self),
        )
        return self

    def get_thread_by_url(self, url: str, *args: Any) -> Forum:
        """
        Get the thread for a URL as a Thread (None if there is none).

        Needs the forum API key; it is fetched first if not cached yet.

        Options:
            partner_api_key
        """
        self.client.gate.with_forum_credential(Forum._get_thread_by_url, self, (url, *args))
        return self

    def _get_thread_by_url(self, url: str, *args: Any) -> None:
        client = self.client
        client.readable.get(
            args,
            "get_thread_by_url",
            {"forum_api_key": self.api_key, "url": url},
            record_transform(Thread, client, forum=self),
        )

    def thread_by_identifier(self, identifier: str, title: str, *args: Any) -> Forum:
        """
        Create or look up the thread with the given identifier.

        Needs the forum API key. Sent as a form submission, so the resulting
        thread cannot be read back: the success callback gets no arguments.
        """
        self.client.gate.with_forum_credential(
            Forum._thread_by_identifier, self, (identifier, title, *args)
        )
        return self

    def _thread_by_identifier(self, identifier: str, title: str, *args: Any) -> None:
        self.client.write_only.post(
            args,
            "thread_by_identifier",
            {"forum_api_key": self.api_key, "identifier": identifier, "title": title},
        )


class Category(DisqusModel):
    """A Disqus category."""


class Thread(TimestampedModel):
    """A Disqus discussion thread."""

    _forum: Forum | None = PrivateAttr(default=None)

    def bind(self, client: Any, forum: Any = None) -> Thread:
        super().bind(client)
        if forum is not None:
            self._forum = forum
        return self

    def bind_forum(self, forum: Forum) -> Thread:
        """Attach the Forum whose API key the thread's write calls use."""
        self._forum = forum
        return self

    @property
    def parent_forum(self) -> Forum:
        if self._forum is None:
            raise UnboundEntityError(f"Thread {self.id!r} is not bound to a forum")
        return self._forum

    def get_thread_posts(self, *args: Any) -> Thread:
        """
        Get the posts in this thread as a list of Post.

        Options:
            limit: Number of entries in the response (server default 25)
            start: Starting point for the query (server default 0)
            filter: Types of entries to return (new, spam or killed)
            exclude: Types of entries to exclude (new, spam or killed)
        """
        client = self.client
        client.readable.get(
            args,
            "get_thread_posts",
            {"user_api_key": client.user_key, "thread_id": self.id},
            list_transform(Post, client, forum=self._forum),
        )
        return self

    def update_thread(self, *args: Any) -> Thread:
        """
        Update this thread; pass the new values as options.

        Options:
            title, slug, url, allow_comments

        Sent as a form submission: the outcome cannot be observed.
        """
        self.client.gate.with_forum_credential(
            Thread._update_thread, self.parent_forum, args, invoke_target=self
        )
        return self

    def _update_thread(self, *args: Any) -> None:
        self.client.write_only.post(
            args,
            "update_thread",
            {"forum_api_key": self.parent_forum.api_key, "thread_id": self.id},
        )

    def create_post(self, message: str, author_name: str, author_email: str, *args: Any) -> Thread:
        """
        Post a comment to this thread.

        Options:
            parent_post, created_at, author_url, ip_address, state

        Sent as a form submission: the created post cannot be read back.
        """
        self.client.gate.with_forum_credential(
            Thread._create_post,
            self.parent_forum,
            (message, author_name, author_email, *args),
            invoke_target=self,
        )
        return self

    def _create_post(self, message: str, author_name: str, author_email: str, *args: Any) -> None:
        self.client.write_only.post(
            args,
            "create_post",
            {
                "forum_api_key": self.parent_forum.api_key,
                "thread_id": self.id,
                "message": message,
                "author_name": author_name,
                "author_email": author_email,
            },
        )


class Post(TimestampedModel):
    """A Disqus discussion post."""

    def moderate_post(self, action: ModerationAction | str, *args: Any) -> Post:
        """
        Delete this post or mark it as spam (or not spam).

        Args:
            action: "spam", "approve" or "kill"

        The outcome cannot be observed: the success callback, if given, is
        called with no arguments once the request has completed, and the
        failure callback is never called.
        """
        action = ModerationAction(action)
        client = self.client
        client.write_only.post(
            args,
            "moderate_post",
            {"user_api_key": client.user_key, "post_id": self.id, "action": action.value},
        )
        return self
