"""
Declarative base for all ORM models.

Alembic reads Base.metadata to know about every table.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass
