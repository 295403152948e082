"""API test fixtures — in-process ASGI client over a freshly built app.

Invariants:
    - Every test gets its own route table, tracker and in-memory store
    - make_client builds an app around any EchoCapability double

Design Decisions:
    - raise_app_exceptions=False: the catch-all handler re-raises after
      responding, and tests assert on the 500 response instead
"""

import pytest
from httpx import ASGITransport, AsyncClient

from layered_echo._internal.api.application import build_application
from layered_echo._internal.api.request_tracking import RequestTracker
from layered_echo._internal.api.route_table import build_route_table
from layered_echo._internal.core.lifecycle_state import LifecycleState
from layered_echo._internal.infrastructure.memory_store import InMemoryKeyValueStore
from layered_echo._internal.services.echo_service import EchoService


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def tracker():
    return RequestTracker()


@pytest.fixture
def make_client(tracker):
    """Factory: async client (use with `async with`) for an app around `echo`."""

    def _make(echo, state=LifecycleState.SERVING):
        table = build_route_table(echo, lambda: state)
        app, _ = build_application(table, tracker)
        return AsyncClient(
            transport=ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://test",
        )

    return _make


@pytest.fixture
async def client(store, make_client):
    async with make_client(EchoService(store, max_message_length=16)) as c:
        yield c
