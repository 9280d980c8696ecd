"""Replays writes that were queued while the VHC server was unreachable."""

import asyncio
import logging

import httpx

from vhc_offline.application.interfaces import CacheStore
from vhc_offline.domain.entities import Partition, PendingOperation, SyncReport
from vhc_offline.infrastructure.logging.sync_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)


class PendingOperationReplayer:
    """Drains the pendingOps partition against the server, oldest first.

    - A 2xx answer removes the entry from the queue.
    - A non-2xx answer is recorded on the entry (attempts, lastError) and
      the drain moves on; the entry is retried on the next drain until it
      reaches ``max_attempts``, after which it is skipped and left for a
      human to inspect.
    - A transport failure stops the drain: the server is gone again and
      later entries would fail the same way.

    Drains are serialised, so overlapping reconnect triggers cannot send
    the same entry twice.
    """

    def __init__(
        self,
        cache_store: CacheStore,
        http_client: httpx.AsyncClient,
        *,
        max_attempts: int = 5,
        sync_logger: SyncLogger | None = None,
    ) -> None:
        self._cache = cache_store
        self._http_client = http_client
        self._max_attempts = max_attempts
        self._log = sync_logger or SyncLogger()
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def replay(self) -> SyncReport:
        async with self._lock:
            return await self._drain()

    async def _drain(self) -> SyncReport:
        report = SyncReport()
        operations = await self._load_queue()
        if not operations:
            logger.debug("No pending operations to replay")
            return report

        with self._log.timed_drain("Replaying pending operations", queued=len(operations)):
            for operation in operations:
                if operation.attempts >= self._max_attempts:
                    report.skipped.append(operation.id)
                    self._log.step_warning(
                        SyncStage.SKIPPED,
                        f"{operation.method} {operation.endpoint}",
                        op_id=operation.id,
                        attempts=operation.attempts,
                    )
                    continue

                self._log.step_start(
                    SyncStage.REPLAY,
                    f"{operation.method} {operation.endpoint}",
                    op_id=operation.id,
                    type=operation.type.value,
                )
                try:
                    response = await self._http_client.request(
                        operation.method, operation.endpoint, json=operation.data
                    )
                except httpx.TransportError as exc:
                    report.interrupted = True
                    self._log.step_error(
                        SyncStage.INTERRUPTED, "Server unreachable, stopping drain", error=exc
                    )
                    break

                if response.is_success:
                    await self._cache.delete(Partition.PENDING_OPS, operation.id)
                    report.replayed.append(operation.id)
                    self._log.step_complete(SyncStage.ACCEPTED, str(response.status_code))
                else:
                    operation.record_failure(f"{response.status_code}: {response.text}")
                    await self._cache.put(Partition.PENDING_OPS, operation.to_record())
                    report.failed.append(operation.id)
                    self._log.step_warning(
                        SyncStage.REJECTED,
                        f"{response.status_code}, kept in queue",
                        op_id=operation.id,
                        attempts=operation.attempts,
                    )

            report.remaining = len(await self._cache.get_all(Partition.PENDING_OPS))
            self._log.stats(
                replayed=len(report.replayed),
                failed=len(report.failed),
                skipped=len(report.skipped),
                remaining=report.remaining,
            )
        return report

    async def _load_queue(self) -> list[PendingOperation]:
        records = await self._cache.get_all(Partition.PENDING_OPS)
        operations = [PendingOperation.from_record(r) for r in records]
        operations.sort(key=lambda op: op.id or 0)
        return operations
