"""ORM Models — SQLAlchemy declarative models for the SQL store backend.

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all runs
"""

from layered_echo._internal.models.store_entry import StoreEntry  # noqa: F401
