"""
Tests for call correlation.

Tests cover:
- Monotonic correlation ids and handler naming
- One-shot handler delivery
- Deregistration before the handler runs
- Unknown and duplicate deliveries
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from disqus_bridge.dispatch.correlator import Correlator, PendingCall


@pytest.fixture
def correlator() -> Correlator:
    return Correlator()


class TestBeginCall:
    """Tests for correlation id allocation."""

    def test_ids_start_at_one(self, correlator: Correlator) -> None:
        """The first call gets id 1."""
        assert correlator.begin_call("get_forum_list").call_id == 1

    def test_ids_increase_and_never_repeat(self, correlator: Correlator) -> None:
        """Ids grow by one per call."""
        ids = [correlator.begin_call("m").call_id for _ in range(100)]

        assert ids == list(range(1, 101))

    def test_ids_not_reused_after_delivery(self, correlator: Correlator) -> None:
        """Settling a call does not free its id."""
        call = correlator.begin_call("m")
        correlator.register_handler(call, MagicMock())
        correlator.invoke(call.call_id, {"succeeded": True})

        assert correlator.begin_call("m").call_id == call.call_id + 1

    def test_handler_name_derived_from_id(self, correlator: Correlator) -> None:
        """Handler names embed the namespace and the id."""
        call = correlator.begin_call("get_thread_list")

        assert call.handler_name == "disqus._handler1"
        assert call.method == "get_thread_list"
        assert call.settled is False

    def test_custom_namespace(self) -> None:
        """The namespace prefix is configurable."""
        correlator = Correlator(namespace="comments")

        assert correlator.begin_call("m").handler_name == "comments._handler1"

    def test_separate_correlators_count_independently(self) -> None:
        """Counters belong to the Correlator instance."""
        a, b = Correlator(), Correlator()
        a.begin_call("m")

        assert b.begin_call("m").call_id == 1


class TestDelivery:
    """Tests for routing responses to handlers."""

    def test_deliver_by_name_invokes_handler(self, correlator: Correlator) -> None:
        """The handler receives the response addressed to its name."""
        handler = MagicMock()
        call = correlator.begin_call("m")
        correlator.register_handler(call, handler)

        assert correlator.deliver(call.handler_name, {"succeeded": True, "message": 1}) is True
        handler.assert_called_once_with({"succeeded": True, "message": 1})
        assert call.settled is True

    def test_handler_runs_at_most_once(self, correlator: Correlator) -> None:
        """A duplicate delivery finds no handler."""
        handler = MagicMock()
        call = correlator.begin_call("m")
        correlator.register_handler(call, handler)

        correlator.deliver(call.handler_name, {"succeeded": True})
        second = correlator.deliver(call.handler_name, {"succeeded": True})

        assert second is False
        assert handler.call_count == 1

    def test_handler_deregistered_before_it_runs(self, correlator: Correlator) -> None:
        """While the handler runs, its id is already gone from the registry."""
        seen: list[bool] = []
        call = correlator.begin_call("m")
        correlator.register_handler(
            call, lambda response: seen.append(correlator.is_registered(call.call_id))
        )

        correlator.invoke(call.call_id, {"succeeded": True})

        assert seen == [False]

    def test_handler_deregistered_even_if_it_raises(self, correlator: Correlator) -> None:
        """A failing handler does not stay registered."""
        call = correlator.begin_call("m")
        correlator.register_handler(call, MagicMock(side_effect=RuntimeError("boom")))

        with pytest.raises(RuntimeError):
            correlator.invoke(call.call_id, {"succeeded": True})

        assert not correlator.is_registered(call.call_id)
        assert correlator.pending_count == 0

    def test_unknown_handler_name_is_ignored(self, correlator: Correlator) -> None:
        """Responses for names never issued are dropped."""
        assert correlator.deliver("disqus._handler99", {"succeeded": True}) is False

    def test_responses_routed_independently(self, correlator: Correlator) -> None:
        """Out-of-order responses reach the right handlers."""
        first, second = MagicMock(), MagicMock()
        call1 = correlator.begin_call("a")
        call2 = correlator.begin_call("b")
        correlator.register_handler(call1, first)
        correlator.register_handler(call2, second)

        correlator.deliver(call2.handler_name, {"n": 2})
        correlator.deliver(call1.handler_name, {"n": 1})

        first.assert_called_once_with({"n": 1})
        second.assert_called_once_with({"n": 2})

    def test_double_registration_rejected(self, correlator: Correlator) -> None:
        """An id holds one handler."""
        call = correlator.begin_call("m")
        correlator.register_handler(call, MagicMock())

        with pytest.raises(ValueError):
            correlator.register_handler(call, MagicMock())


class TestPending:
    """Tests for pending call tracking."""

    def test_pending_until_delivered(self, correlator: Correlator) -> None:
        """Undelivered calls stay pending indefinitely."""
        calls = [correlator.begin_call("m") for _ in range(3)]
        for call in calls:
            correlator.register_handler(call, MagicMock())

        correlator.invoke(calls[1].call_id, {})

        assert correlator.pending_ids() == [1, 3]
        assert correlator.pending_count == 2

    def test_pending_call_equality_ignores_settled(self) -> None:
        """Handles compare by identity fields only."""
        a = PendingCall(call_id=1, handler_name="disqus._handler1", method="m")
        b = PendingCall(call_id=1, handler_name="disqus._handler1", method="m", settled=True)

        assert a == b

    def test_discard_unsent_call(self, correlator: Correlator) -> None:
        """A discarded call is gone by id and by name, and its handler never runs."""
        handler = MagicMock()
        call = correlator.begin_call("m")
        correlator.register_handler(call, handler)

        assert correlator.discard(call.call_id) is True
        assert correlator.discard(call.call_id) is False
        assert correlator.deliver(call.handler_name, {"succeeded": True}) is False
        handler.assert_not_called()
        assert correlator.pending_count == 0
