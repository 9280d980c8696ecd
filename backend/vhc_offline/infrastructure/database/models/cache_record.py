"""SQLAlchemy ORM model for keyed cache partitions (jobs, vhcData, vehicles, ...)."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from vhc_offline.infrastructure.database.base import Base


class CacheRecordModel(Base):
    """ORM model: maps to the 'cache_records' table.

    One row per (partition, key). The record itself is kept verbatim in
    ``data``; secondary-index lookups read fields out of that JSON.
    """

    __tablename__ = "cache_records"

    partition: Mapped[str] = mapped_column(String(50), primary_key=True)
    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    captured_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_cache_records_partition_captured", "partition", "captured_at"),
    )

    def __repr__(self) -> str:
        return f"<CacheRecordModel(partition='{self.partition}', key='{self.key}')>"
