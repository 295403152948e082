"""SQL Store — SQLAlchemy-backed KeyValueStore with automatic rollback.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - All SQLAlchemy exceptions mapped to StoreUnavailableError (core/errors.py)
    - Schema created and connectivity probed at construction, so a bad URL fails wiring
    - Sessions serialized by an internal lock; callers never coordinate locking

Design Decisions:
    - Synchronous engine: requests already run on worker threads
    - In-memory SQLite uses StaticPool + check_same_thread=False: one shared
      connection that every worker thread can see, which is why the lock exists
    - expire_on_commit=False: returned values stay readable after the session closes
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from layered_echo._internal.core.errors import StoreUnavailableError
from layered_echo._internal.db.base import Base
from layered_echo._internal.models import StoreEntry

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True, "pool_recycle": 3600}
    options: dict = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return options


class SqlKeyValueStore:
    """KeyValueStore persisted in a single SQL table."""

    def __init__(self, database_url: str):
        self.engine = create_engine(database_url, **_engine_options(database_url))
        self._session_factory = sessionmaker(self.engine, expire_on_commit=False)
        self._lock = threading.Lock()
        self._closed = False
        try:
            Base.metadata.create_all(self.engine)
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            self.engine.dispose()
            raise
        logger.debug(f"SQL store ready on {self.engine.url.render_as_string()}")

    @contextmanager
    def session(self, operation: str) -> Iterator[Session]:
        """Provide session with auto-rollback on exception."""
        with self._lock:
            if self._closed:
                raise StoreUnavailableError("store is closed", operation)
            session = self._session_factory()
            try:
                yield session
            except IntegrityError as e:
                session.rollback()
                logger.error(f"DB integrity error: {e}")
                raise StoreUnavailableError("Integrity constraint violated", operation) from e
            except OperationalError as e:
                session.rollback()
                logger.error(f"DB operational error: {e}")
                raise StoreUnavailableError("Connection or operational error", operation) from e
            except DBAPIError as e:
                session.rollback()
                logger.error(f"DB driver error: {e}")
                raise StoreUnavailableError("Database driver error", operation) from e
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"SQLAlchemy error: {e}")
                raise StoreUnavailableError("Database operation failed", operation) from e
            finally:
                session.close()

    def get(self, key: str) -> str | None:
        with self.session("get") as db:
            entry = db.get(StoreEntry, key)
            return entry.value if entry else None

    def put(self, key: str, value: str) -> None:
        with self.session("put") as db:
            db.merge(StoreEntry(key=key, value=value))
            db.commit()

    def delete(self, key: str) -> bool:
        with self.session("delete") as db:
            entry = db.get(StoreEntry, key)
            if entry is None:
                return False
            db.delete(entry)
            db.commit()
            return True

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self.engine.dispose()
        logger.debug("SQL store closed")
