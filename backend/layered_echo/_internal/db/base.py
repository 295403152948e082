"""Declarative Base — metadata shared by the SQL store's tables.

Invariants:
    - Every store table inherits from Base and registers on Base.metadata
    - Constraint names are deterministic (NAMING_CONVENTION), so create_all
      produces the same schema on every backend
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "pk": "pk_%(table_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ix": "ix_%(table_name)s_%(column_0_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
