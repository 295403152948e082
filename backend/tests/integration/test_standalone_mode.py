"""Standalone Mode — run() blocks its thread and serves the same bytes as embedded mode."""

import threading

import pytest

import layered_echo

from tests.integration.service_sockets import raw_request


@pytest.fixture
def standalone_service(start_service):
    handle = start_service(mode=layered_echo.HostingMode.STANDALONE)
    runner = threading.Thread(target=handle.run, daemon=True)
    runner.start()
    assert handle.wait_until_serving(5)
    yield handle
    handle.stop()
    runner.join(5)


def test_run_serves_until_stopped(standalone_service, http):
    assert standalone_service.state is layered_echo.LifecycleState.SERVING
    res = http.get(f"{standalone_service.base_url}/echo/foo")
    assert res.json() == {"echo": "foo", "length": 3}

    report = standalone_service.stop()
    assert report.clean
    assert standalone_service.state is layered_echo.LifecycleState.STOPPED


@pytest.mark.parametrize("method, path", [
    ("GET", "/echo/foo"),
    ("GET", "/echo/caf%C3%A9"),
    ("GET", "/unknown"),
    ("POST", "/echo/foo"),
    ("GET", "/echo/%20"),
    ("GET", "/health"),
])
def test_responses_are_byte_identical_across_modes(
    standalone_service, embedded_service, method, path,
):
    standalone = raw_request(standalone_service.address, path, method)
    embedded = raw_request(embedded_service.address, path, method)
    assert standalone == embedded
    assert standalone.startswith(b"HTTP/1.1 ")
