"""
Tests for call argument classification.

Tests cover:
- Positional callables (success first, failure second, rest dropped)
- Options mapping detection (first one wins)
- Ignored argument types
- Explicit CallShape arguments
"""

from __future__ import annotations

from datetime import UTC, datetime
from types import MappingProxyType
from unittest.mock import MagicMock

from disqus_bridge.dispatch.arguments import CallShape, classify


def fn1(result=None):
    return result


def fn2(code=None):
    return code


def fn3(*_):
    return None


class TestClassifyCallables:
    """Tests for callable classification."""

    def test_first_callable_is_success(self) -> None:
        """A lone callable becomes the success callback."""
        shape = classify([fn1])

        assert shape.on_success is fn1
        assert shape.on_failure is None
        assert shape.options is None

    def test_second_callable_is_failure(self) -> None:
        """The second callable becomes the failure callback."""
        shape = classify([fn1, fn2])

        assert shape.on_success is fn1
        assert shape.on_failure is fn2

    def test_third_callable_is_dropped(self) -> None:
        """Callables past the second are ignored."""
        shape = classify([fn1, fn2, fn3])

        assert shape.on_success is fn1
        assert shape.on_failure is fn2
        assert fn3 not in (shape.on_success, shape.on_failure)

    def test_lambdas_and_mocks_count_as_callables(self) -> None:
        """Any callable object qualifies."""
        mock = MagicMock()
        shape = classify([lambda r: r, mock])

        assert shape.on_success is not None
        assert shape.on_failure is mock

    def test_no_callables(self) -> None:
        """Without callables, no slot is filled and nothing can be notified."""
        shape = classify([{"limit": 5}])

        assert shape.on_success is None
        assert shape.on_failure is None
        shape.succeed([])
        shape.fail(500)


class TestClassifyOptions:
    """Tests for options detection."""

    def test_callback_and_options(self) -> None:
        """classify([fn1, {limit: 5}]) -> success fn1, options {limit: 5}."""
        shape = classify([fn1, {"limit": 5}])

        assert shape == CallShape(on_success=fn1, options={"limit": 5})

    def test_options_in_any_position(self) -> None:
        """Options may come before, between or after the callbacks."""
        options = {"start": 10}

        assert classify([options, fn1, fn2]).options is options
        assert classify([fn1, options, fn2]).options is options
        assert classify([fn1, fn2, options]).options is options

    def test_options_do_not_shift_callables(self) -> None:
        """A mapping between callables does not change their roles."""
        shape = classify([fn1, {"limit": 1}, fn2])

        assert shape.on_success is fn1
        assert shape.on_failure is fn2

    def test_first_mapping_wins(self) -> None:
        """A second options mapping is dropped."""
        first = {"limit": 5}
        second = {"limit": 50}

        assert classify([first, second]).options is first

    def test_any_mapping_counts(self) -> None:
        """Read-only mappings are options too."""
        options = MappingProxyType({"limit": 5})

        assert classify([options]).options is options


class TestClassifyIgnored:
    """Tests for values that are neither callbacks nor options."""

    def test_scalars_are_ignored(self) -> None:
        """Strings, numbers, None, lists and dates are skipped."""
        shape = classify(
            ["http://example.com/page", 42, None, [1, 2], datetime(2020, 1, 1, tzinfo=UTC), fn1]
        )

        assert shape.on_success is fn1
        assert shape.on_failure is None
        assert shape.options is None

    def test_empty_arguments(self) -> None:
        """No arguments classify to an empty shape."""
        assert classify([]) == CallShape()

    def test_accepts_any_iterable(self) -> None:
        """Tuples and generators work like lists."""
        assert classify((fn1,)).on_success is fn1
        assert classify(arg for arg in [fn1, fn2]).on_failure is fn2


class TestExplicitCallShape:
    """Tests for CallShape passed as an argument."""

    def test_call_shape_passes_through(self) -> None:
        """A CallShape alone classifies to an equal shape."""
        shape = CallShape(on_success=fn1, on_failure=fn2, options={"limit": 3})

        assert classify([shape]) == shape

    def test_call_shape_fills_empty_slots(self) -> None:
        """Slots already filled by loose arguments are kept."""
        shape = classify([fn3, CallShape(on_success=fn1, on_failure=fn2)])

        assert shape.on_success is fn3
        assert shape.on_failure is fn2

    def test_loose_callable_after_failure_only_shape(self) -> None:
        """A loose callable still fills an empty success slot."""
        shape = classify([CallShape(on_failure=fn2), fn1])

        assert shape.on_success is fn1
        assert shape.on_failure is fn2

    def test_succeed_and_fail_helpers(self) -> None:
        """succeed/fail forward to the callbacks that are present."""
        on_success = MagicMock()
        on_failure = MagicMock()
        shape = CallShape(on_success=on_success, on_failure=on_failure)

        shape.succeed("payload")
        shape.fail(403)

        on_success.assert_called_once_with("payload")
        on_failure.assert_called_once_with(403)
