"""Domain entity for pending operations: writes queued while offline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .partition import capture_timestamp

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class OperationKind(str, Enum):
    """What a queued write does, classified from its endpoint and verb."""

    CREATE_JOB = "CREATE_JOB"
    UPDATE_JOB = "UPDATE_JOB"
    CREATE_VHC = "CREATE_VHC"
    UPDATE_VHC = "UPDATE_VHC"
    CREATE_FIT_FINISH = "CREATE_FIT_FINISH"
    UPDATE_FIT_FINISH = "UPDATE_FIT_FINISH"
    UNKNOWN = "UNKNOWN"


@dataclass
class PendingOperation:
    """A mutating request captured while offline, replayable without extra context.

    The id is assigned by the store on enqueue and orders the queue.
    """

    type: OperationKind
    endpoint: str
    method: str
    data: Any = None
    id: int | None = None
    timestamp: int = field(default_factory=capture_timestamp)
    attempts: int = 0
    last_error: str | None = None

    def record_failure(self, error: str) -> None:
        """Note a failed replay attempt; the entry stays queued."""
        self.attempts += 1
        self.last_error = error[:500]

    def to_record(self) -> dict[str, Any]:
        """Serialise to the camelCase record shape stored in the pendingOps partition."""
        record: dict[str, Any] = {
            "type": self.type.value,
            "data": self.data,
            "endpoint": self.endpoint,
            "method": self.method,
            "timestamp": self.timestamp,
            "attempts": self.attempts,
            "lastError": self.last_error,
        }
        if self.id is not None:
            record["id"] = self.id
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "PendingOperation":
        try:
            kind = OperationKind(record.get("type", "UNKNOWN"))
        except ValueError:
            kind = OperationKind.UNKNOWN
        return cls(
            type=kind,
            endpoint=record["endpoint"],
            method=record["method"],
            data=record.get("data"),
            id=record.get("id"),
            timestamp=record.get("timestamp") or capture_timestamp(),
            attempts=record.get("attempts", 0) or 0,
            last_error=record.get("lastError"),
        )


@dataclass
class SyncReport:
    """Outcome of one drain of the pending-operation queue."""

    replayed: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    remaining: int = 0
    interrupted: bool = False

    @property
    def attempted(self) -> int:
        return len(self.replayed) + len(self.failed)
