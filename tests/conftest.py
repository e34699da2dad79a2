"""
Disqus Bridge - Test Fixtures

Shared pytest fixtures for all test modules.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from disqus_bridge.client import DisqusClient, configure_client
from disqus_bridge.config import DisqusSettings, configure_settings
from disqus_bridge.transport.base import Deliver, ScriptRequest, SubmissionSurface

# Keep a developer's real key out of the test run
os.environ.pop("DISQUS_USER_API_KEY", None)


# =============================================================================
# Recording Transport
# =============================================================================


class RecordingTransport:
    """
    In-memory transport.

    Records what the channels send and lets the test decide when (and
    whether) anything comes back.
    """

    def __init__(self) -> None:
        self.scripts: list[tuple[ScriptRequest, Deliver]] = []
        self.forms: list[SubmissionSurface] = []
        self.deferred: list[Callable[[], None]] = []

    def fetch_script(self, request: ScriptRequest, deliver: Deliver) -> None:
        self.scripts.append((request, deliver))

    def submit_form(self, surface: SubmissionSurface) -> None:
        self.forms.append(surface)

    def defer(self, fn: Callable[[], None]) -> None:
        self.deferred.append(fn)

    # ==================== Test controls ====================

    def requests_for(self, method: str) -> list[ScriptRequest]:
        return [request for request, _ in self.scripts if request.url.endswith(f"/{method}/")]

    def respond(self, request: ScriptRequest, payload: dict[str, Any]) -> bool:
        """Deliver payload the way a loaded script would: by handler name."""
        for recorded, deliver in self.scripts:
            if recorded is request:
                return deliver(request.handler_name, payload)
        raise AssertionError(f"No such request: {request}")

    def succeed(self, request: ScriptRequest, message: Any) -> bool:
        return self.respond(request, {"succeeded": True, "message": message})

    def fail(self, request: ScriptRequest, code: Any) -> bool:
        return self.respond(request, {"succeeded": False, "code": code})

    def run_deferred(self) -> int:
        ran = 0
        while self.deferred:
            self.deferred.pop(0)()
            ran += 1
        return ran


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings() -> DisqusSettings:
    """Test configuration with a fixed user key."""
    return DisqusSettings(
        api_base_url="https://disqus.test/api/",
        user_api_key="user-key",
    )


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def client(settings: DisqusSettings, transport: RecordingTransport) -> DisqusClient:
    """A client wired to the recording transport."""
    return DisqusClient(settings=settings, transport=transport)


@pytest.fixture
def forum(client: DisqusClient):
    """A forum without a cached API key."""
    return client.forum(42, shortname="example", name="Example")


@pytest.fixture
def callbacks() -> tuple[MagicMock, MagicMock]:
    """A (success, failure) callback pair."""
    return MagicMock(name="on_success"), MagicMock(name="on_failure")


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset the process-wide settings and client around each test."""
    configure_settings(None)
    configure_client(None)
    yield
    configure_settings(None)
    configure_client(None)
