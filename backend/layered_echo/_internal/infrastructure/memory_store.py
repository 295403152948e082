"""In-Memory Store — dict-backed KeyValueStore for the default wiring and tests.

Invariants:
    - Every read and write holds the same lock (no lost updates under concurrency)
    - After close(), every operation raises StoreUnavailableError
"""

import logging
import threading

from layered_echo._internal.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore:
    """Thread-safe in-process key/value store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()
        self._closed = False

    def get(self, key: str) -> str | None:
        with self._lock:
            self._check_open("get")
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._check_open("put")
            self._data[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            self._check_open("delete")
            return self._data.pop(key, None) is not None

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._data.clear()
        logger.debug("In-memory store closed")

    def _check_open(self, operation: str) -> None:
        if self._closed:
            raise StoreUnavailableError("store is closed", operation)
