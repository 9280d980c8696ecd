"""Abstract cache store interface (port) for the offline local cache."""

from abc import ABC, abstractmethod
from typing import Any

from vhc_offline.domain.entities import Partition

CacheKey = str | int
CacheRecord = dict[str, Any]


class CacheStore(ABC):
    """Port for durable, partitioned key-value persistence on the client.

    Records are JSON objects. Each partition declares the field holding the
    record key and the fields usable for secondary-index lookups.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Open the store and create its partitions. Safe to call repeatedly.

        Raises StorageUnavailableError if the store cannot be opened.
        """
        ...

    @abstractmethod
    async def get(self, partition: Partition | str, key: CacheKey) -> CacheRecord | None:
        """Point lookup: None when the key is absent."""
        ...

    @abstractmethod
    async def get_all(self, partition: Partition | str) -> list[CacheRecord]:
        """Every record in the partition; order unspecified."""
        ...

    @abstractmethod
    async def get_all_by_index(
        self, partition: Partition | str, index_name: str, value: Any
    ) -> list[CacheRecord]:
        """Records whose indexed field equals value."""
        ...

    @abstractmethod
    async def put(self, partition: Partition | str, record: CacheRecord) -> CacheKey:
        """Upsert a record, stamping its capture time. Returns the record key."""
        ...

    @abstractmethod
    async def delete(self, partition: Partition | str, key: CacheKey) -> None:
        """Remove a record if present. Absent keys are not an error."""
        ...

    @abstractmethod
    async def clear_all(self) -> None:
        """Wipe every partition atomically."""
        ...

    async def close(self) -> None:
        """Release underlying resources. No-op by default."""
        return None
