"""Domain entity: named partitions of the local cache store."""

import time
from dataclasses import dataclass
from enum import Enum


class Partition(str, Enum):
    """Entity categories persisted in the local cache."""

    JOBS = "jobs"
    PENDING_OPS = "pendingOps"
    VHC_DATA = "vhcData"
    FIT_FINISH_DATA = "fitFinishData"
    VEHICLES = "vehicles"
    CUSTOMERS = "customers"
    USER_DATA = "userData"


@dataclass(frozen=True)
class PartitionSpec:
    """Key path and secondary indexes declared for one partition."""

    partition: Partition
    key_path: str
    indexes: tuple[str, ...] = ()
    auto_increment: bool = False


PARTITION_SPECS: dict[Partition, PartitionSpec] = {
    Partition.JOBS: PartitionSpec(
        Partition.JOBS, "id", ("userId", "status", "timestamp")
    ),
    Partition.PENDING_OPS: PartitionSpec(
        Partition.PENDING_OPS, "id", ("type", "timestamp"), auto_increment=True
    ),
    Partition.VHC_DATA: PartitionSpec(Partition.VHC_DATA, "jobId", ("timestamp",)),
    Partition.FIT_FINISH_DATA: PartitionSpec(
        Partition.FIT_FINISH_DATA, "jobId", ("timestamp",)
    ),
    Partition.VEHICLES: PartitionSpec(Partition.VEHICLES, "vrm", ("timestamp",)),
    Partition.CUSTOMERS: PartitionSpec(Partition.CUSTOMERS, "id", ("timestamp",)),
    Partition.USER_DATA: PartitionSpec(Partition.USER_DATA, "id"),
}


def get_partition_spec(partition: Partition | str) -> PartitionSpec:
    """Resolve a partition (enum or raw name) to its spec.

    Raises ValueError for names that are not a known partition.
    """
    try:
        return PARTITION_SPECS[Partition(partition)]
    except ValueError:
        raise ValueError(f"Unknown cache partition: {partition!r}") from None


def capture_timestamp() -> int:
    """Current time as epoch milliseconds: the stamp written on every cache put."""
    return int(time.time() * 1000)
