"""StoreEntry ORM — one row per key in the SQL-backed KeyValueStore.

Invariants:
    - key is the primary key (put is an upsert by key)
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from layered_echo._internal.db.base import Base


class StoreEntry(Base):
    """Key/value row."""
    __tablename__ = "store_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
