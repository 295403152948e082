"""Lifecycle test fixtures — recording factories and an occupied port."""

import socket

import pytest

from tests.lifecycle.recording_doubles import RecordingEcho, RecordingStore


@pytest.fixture
def events() -> list[str]:
    return []


@pytest.fixture
def store_factory(events):
    return lambda: RecordingStore(events)


@pytest.fixture
def echo_factory(events):
    return lambda store: RecordingEcho(store, events)


@pytest.fixture
def busy_port():
    """A port with a live listener on it for the duration of the test."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    yield sock.getsockname()[1]
    sock.close()
