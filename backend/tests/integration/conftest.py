"""Integration fixtures — real services on ephemeral ports, driven over real sockets.

Invariants:
    - Only the public layered_echo surface is imported by these tests
    - Every service started by a fixture is stopped at teardown, pass or fail
"""

import httpx
import pytest

import layered_echo

from tests.integration.service_sockets import GatedEcho


@pytest.fixture
def start_service():
    """Factory: start a service with the given settings; stopped at teardown."""
    handles = []

    def _start(**settings) -> layered_echo.ServiceHandle:
        settings.setdefault("port", 0)
        handle = layered_echo.start(layered_echo.ServiceConfiguration(**settings))
        handles.append(handle)
        return handle

    yield _start
    for handle in handles:
        handle.stop()


@pytest.fixture
def embedded_service(start_service):
    return start_service(mode=layered_echo.HostingMode.EMBEDDED)


@pytest.fixture
def gated_service(start_service):
    """Embedded service whose echo capability can be held open; yields (handle, echo)."""
    created = []

    def echo_factory(store):
        created.append(GatedEcho(store))
        return created[0]

    handle = start_service(
        mode=layered_echo.HostingMode.EMBEDDED,
        echo_factory=echo_factory,
        drain_timeout_seconds=0.5,
    )
    yield handle, created[0]
    created[0].gate.set()


@pytest.fixture
def http():
    with httpx.Client(trust_env=False, timeout=10) as client:
        yield client
