"""SQLAlchemy ORM model recording the cache store's name and schema version."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from vhc_offline.infrastructure.database.base import Base


class StoreMetadataModel(Base):
    """ORM model: maps to the 'store_metadata' table (one row per store name)."""

    __tablename__ = "store_metadata"

    name: Mapped[str] = mapped_column(String(100), primary_key=True)
    schema_version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    upgraded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
