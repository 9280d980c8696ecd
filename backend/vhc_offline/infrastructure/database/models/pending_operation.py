"""SQLAlchemy ORM model for the pendingOps partition (queued offline writes)."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import BigInteger, DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vhc_offline.infrastructure.database.base import Base


class PendingOperationModel(Base):
    """ORM model: maps to the 'pending_operations' table.

    Ids auto-increment and are never reused, so they give the replay order.
    """

    __tablename__ = "pending_operations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    endpoint: Mapped[str] = mapped_column(String(2048), nullable=False)
    method: Mapped[str] = mapped_column(String(10), nullable=False)
    data: Mapped[Any] = mapped_column(JSON, nullable=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    captured_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self) -> str:
        return (
            f"<PendingOperationModel(id={self.id}, type='{self.type}', "
            f"{self.method} {self.endpoint})>"
        )
