"""
Forum Credential Gate

Some API methods need the forum-scoped API key. The gate runs such a call
at once when the forum has the key cached, and otherwise fetches the key
first and replays the call when it arrives.

Calls that arrive while a fetch is already in flight wait in the forum's
queue instead of starting another fetch; all of them are replayed, in
order, once the key is cached. If the fetch fails, every waiting call's
failure callback receives the code and the forum stays without a key, so
the next gated call tries again.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from .arguments import classify

if TYPE_CHECKING:
    from ..models.entities import Forum

logger = structlog.get_logger(__name__)

BoundCall = Callable[..., Any]


@dataclass
class DeferredCall:
    """A gated call waiting for its forum's API key."""

    bound_call: BoundCall
    target: Any
    args: tuple[Any, ...]

    def replay(self) -> None:
        self.bound_call(self.target, *self.args)

    def reject(self, code: Any) -> None:
        classify(self.args).fail(code)


class CredentialGate:
    """Defers forum-key calls until the forum's key is known."""

    def with_forum_credential(
        self,
        bound_call: BoundCall,
        forum: Forum,
        original_args: Sequence[Any],
        invoke_target: Any = None,
    ) -> None:
        """
        Run bound_call(invoke_target, *original_args) once forum has its key.

        Args:
            bound_call: Unbound method (or function) performing the call
            forum: The forum whose API key the call needs
            original_args: The caller's arguments, replayed verbatim
            invoke_target: Object bound_call runs against (defaults to forum)
        """
        deferred = DeferredCall(
            bound_call=bound_call,
            target=forum if invoke_target is None else invoke_target,
            args=tuple(original_args),
        )

        if forum.has_credential:
            deferred.replay()
            return

        waiters = forum._credential_waiters
        waiters.append(deferred)
        if len(waiters) > 1:
            logger.debug("credential_fetch_pending", forum_id=forum.id, waiting=len(waiters))
            return

        logger.debug("credential_fetch_started", forum_id=forum.id)

        def on_key(api_key: str) -> None:
            forum.api_key = api_key
            ready = list(waiters)
            waiters.clear()
            logger.debug("credential_cached", forum_id=forum.id, replaying=len(ready))
            for call in ready:
                try:
                    call.replay()
                except Exception as e:
                    logger.error(
                        "gated_call_replay_failed", forum_id=forum.id, error=str(e), exc_info=True
                    )

        def on_failure(code: Any) -> None:
            rejected = list(waiters)
            waiters.clear()
            logger.warning(
                "credential_fetch_failed", forum_id=forum.id, code=code, rejected=len(rejected)
            )
            for call in rejected:
                try:
                    call.reject(code)
                except Exception as e:
                    logger.error(
                        "gated_call_reject_failed", forum_id=forum.id, error=str(e), exc_info=True
                    )

        try:
            forum.get_forum_api_key(on_key, on_failure)
        except Exception:
            # No fetch is in flight; the next gated call must start one
            waiters.clear()
            raise
