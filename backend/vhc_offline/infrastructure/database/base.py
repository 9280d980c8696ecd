"""SQLAlchemy ORM base for the local cache store tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base shared by the cache partition tables."""
