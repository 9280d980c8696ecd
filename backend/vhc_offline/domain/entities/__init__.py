from .partition import (
    Partition,
    PartitionSpec,
    PARTITION_SPECS,
    get_partition_spec,
    capture_timestamp,
)
from .pending_operation import (
    OperationKind,
    PendingOperation,
    SyncReport,
    WRITE_METHODS,
)
from .inspection import InspectionCategory, InspectionStatus, ServiceInterval
from .request_outcome import RequestOutcome

__all__ = [
    "Partition",
    "PartitionSpec",
    "PARTITION_SPECS",
    "get_partition_spec",
    "capture_timestamp",
    "OperationKind",
    "PendingOperation",
    "SyncReport",
    "WRITE_METHODS",
    "InspectionCategory",
    "InspectionStatus",
    "ServiceInterval",
    "RequestOutcome",
]
