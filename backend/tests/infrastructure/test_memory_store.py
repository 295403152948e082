"""In-Memory Store — CRUD contract and concurrency safety.

Tests:
    - get/put/delete behave as a key/value map
    - Concurrent writers from many threads lose no updates
    - Every operation after close() raises StoreUnavailableError
"""

import threading

import pytest

from layered_echo._internal.core.errors import StoreUnavailableError
from layered_echo._internal.infrastructure.memory_store import InMemoryKeyValueStore


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


def test_get_missing_returns_none(store):
    assert store.get("nope") is None


def test_put_then_get(store):
    store.put("k", "v")
    assert store.get("k") == "v"


def test_put_overwrites(store):
    store.put("k", "v1")
    store.put("k", "v2")
    assert store.get("k") == "v2"


def test_delete_reports_presence(store):
    store.put("k", "v")
    assert store.delete("k") is True
    assert store.delete("k") is False
    assert store.get("k") is None


@pytest.mark.parametrize("op", [
    lambda s: s.get("k"),
    lambda s: s.put("k", "v"),
    lambda s: s.delete("k"),
])
def test_operations_after_close_raise(store, op):
    store.close()
    with pytest.raises(StoreUnavailableError):
        op(store)


def test_concurrent_puts_lose_nothing(store):
    workers, per_worker = 16, 200
    barrier = threading.Barrier(workers)

    def write(worker: int):
        barrier.wait()
        for i in range(per_worker):
            store.put(f"{worker}:{i}", str(i))

    threads = [threading.Thread(target=write, args=(w,)) for w in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)

    for w in range(workers):
        for i in range(per_worker):
            assert store.get(f"{w}:{i}") == str(i)


def test_concurrent_writers_to_one_key_leave_a_written_value(store):
    values = {str(i) for i in range(32)}
    threads = [threading.Thread(target=store.put, args=("shared", v)) for v in values]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)
    assert store.get("shared") in values
