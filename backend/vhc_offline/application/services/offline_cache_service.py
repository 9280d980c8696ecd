"""Typed accessors over the local cache, one pair per entity category."""

import logging
from typing import Any

from vhc_offline.application.interfaces import CacheKey, CacheRecord, CacheStore
from vhc_offline.domain.entities import OperationKind, Partition, PendingOperation

logger = logging.getLogger(__name__)


class OfflineCacheService:
    """Application service wrapping the CacheStore with entity-level helpers."""

    def __init__(self, cache_store: CacheStore):
        self._store = cache_store

    # Jobs

    async def save_job(self, job: CacheRecord) -> CacheKey:
        return await self._store.put(Partition.JOBS, job)

    async def get_job(self, job_id: CacheKey) -> CacheRecord | None:
        return await self._store.get(Partition.JOBS, job_id)

    async def get_jobs_for_user(self, user_id: Any) -> list[CacheRecord]:
        return await self._store.get_all_by_index(Partition.JOBS, "userId", user_id)

    # Inspection data, keyed by job

    async def save_vhc_data(self, job_id: str, data: CacheRecord) -> CacheKey:
        return await self._store.put(Partition.VHC_DATA, {"jobId": job_id, **data})

    async def get_vhc_data(self, job_id: str) -> CacheRecord | None:
        return await self._store.get(Partition.VHC_DATA, job_id)

    async def save_fit_finish_data(self, job_id: str, data: CacheRecord) -> CacheKey:
        return await self._store.put(Partition.FIT_FINISH_DATA, {"jobId": job_id, **data})

    async def get_fit_finish_data(self, job_id: str) -> CacheRecord | None:
        return await self._store.get(Partition.FIT_FINISH_DATA, job_id)

    # Reference data

    async def save_vehicle(self, vehicle: CacheRecord) -> CacheKey:
        return await self._store.put(Partition.VEHICLES, vehicle)

    async def get_vehicle(self, vrm: str) -> CacheRecord | None:
        return await self._store.get(Partition.VEHICLES, vrm)

    async def save_customer(self, customer: CacheRecord) -> CacheKey:
        return await self._store.put(Partition.CUSTOMERS, customer)

    async def get_customer(self, customer_id: CacheKey) -> CacheRecord | None:
        return await self._store.get(Partition.CUSTOMERS, customer_id)

    async def save_user_data(self, user_data: CacheRecord) -> CacheKey:
        return await self._store.put(Partition.USER_DATA, user_data)

    async def get_user_data(self, user_id: CacheKey) -> CacheRecord | None:
        return await self._store.get(Partition.USER_DATA, user_id)

    # Pending operations

    async def add_pending_operation(
        self,
        kind: OperationKind,
        endpoint: str,
        method: str,
        data: Any = None,
    ) -> int:
        operation = PendingOperation(type=kind, endpoint=endpoint, method=method.upper(), data=data)
        operation_id = await self._store.put(Partition.PENDING_OPS, operation.to_record())
        logger.info("Queued %s %s as #%s", operation.method, endpoint, operation_id)
        return int(operation_id)

    async def get_pending_operations(self) -> list[PendingOperation]:
        records = await self._store.get_all(Partition.PENDING_OPS)
        operations = [PendingOperation.from_record(r) for r in records]
        operations.sort(key=lambda op: op.id or 0)
        return operations

    async def clear_pending_operation(self, operation_id: int) -> None:
        await self._store.delete(Partition.PENDING_OPS, operation_id)

    async def reset(self) -> None:
        """Wipe every partition, e.g. on logout."""
        await self._store.clear_all()
        logger.info("Local cache reset")
