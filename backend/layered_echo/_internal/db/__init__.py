"""Database Infrastructure — SQLAlchemy declarative Base for the SQL store backend."""
