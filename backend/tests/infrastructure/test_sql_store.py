"""SQL Store — SQLAlchemy-backed KeyValueStore against SQLite.

Tests:
    - CRUD contract on in-memory and file-backed SQLite
    - Data persists across store instances for a file URL
    - Concurrent writers lose no updates (shared StaticPool connection)
    - Unreachable database fails at construction
    - SQLAlchemy errors map to StoreUnavailableError; closed store raises
"""

import threading

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from layered_echo._internal.core.errors import StoreUnavailableError
from layered_echo._internal.infrastructure.sql_store import SqlKeyValueStore


@pytest.fixture
def store():
    s = SqlKeyValueStore("sqlite+pysqlite:///:memory:")
    yield s
    s.close()


def test_get_missing_returns_none(store):
    assert store.get("missing") is None


def test_put_then_get(store):
    store.put("k", "v")
    assert store.get("k") == "v"


def test_put_is_upsert(store):
    store.put("k", "v1")
    store.put("k", "v2")
    assert store.get("k") == "v2"


def test_delete_reports_presence(store):
    store.put("k", "v")
    assert store.delete("k") is True
    assert store.delete("k") is False


def test_file_database_persists_across_instances(tmp_path):
    url = f"sqlite+pysqlite:///{tmp_path / 'echo.db'}"
    first = SqlKeyValueStore(url)
    first.put("k", "persisted")
    first.close()

    second = SqlKeyValueStore(url)
    assert second.get("k") == "persisted"
    second.close()


def test_concurrent_puts_lose_nothing(store):
    workers, per_worker = 8, 25

    def write(worker: int):
        for i in range(per_worker):
            store.put(f"{worker}:{i}", str(i))

    threads = [threading.Thread(target=write, args=(w,)) for w in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(30)

    for w in range(workers):
        for i in range(per_worker):
            assert store.get(f"{w}:{i}") == str(i)


def test_unreachable_database_fails_at_construction(tmp_path):
    url = f"sqlite+pysqlite:///{tmp_path / 'missing' / 'dir' / 'echo.db'}"
    with pytest.raises(OperationalError):
        SqlKeyValueStore(url)


def test_sqlalchemy_error_mapped_and_rolled_back(store):
    with pytest.raises(StoreUnavailableError) as exc_info:
        with store.session("put"):
            raise SQLAlchemyError("simulated")
    assert exc_info.value.operation == "put"
    # Store remains usable after the failed session
    store.put("k", "v")
    assert store.get("k") == "v"


def test_operations_after_close_raise():
    s = SqlKeyValueStore("sqlite+pysqlite:///:memory:")
    s.close()
    with pytest.raises(StoreUnavailableError):
        s.get("k")
