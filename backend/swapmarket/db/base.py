"""SQLAlchemy Declarative Base — shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - Base.metadata is the single source of truth for tables and constraint names

Design Decisions:
    - Separate file for Base: avoids circular imports between models
    - Naming convention on MetaData: alembic can drop/recreate constraints by
      predictable names on both PostgreSQL and SQLite
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase


NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all SwapMarket ORM models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
