"""Pydantic DTOs for the pending-operation queue and its replay."""

from typing import Any

from pydantic import BaseModel


class PendingOperationResponse(BaseModel):
    """A queued write as stored in the pendingOps partition."""

    id: int | None
    type: str
    endpoint: str
    method: str
    data: Any = None
    timestamp: int
    attempts: int = 0
    last_error: str | None = None

    model_config = {"from_attributes": True}


class SyncReportResponse(BaseModel):
    """Outcome of one drain of the queue."""

    replayed: list[int]
    failed: list[int]
    skipped: list[int]
    remaining: int
    interrupted: bool

    model_config = {"from_attributes": True}
