"""Connectivity state as seen by the request layer."""

from fastapi import APIRouter, Depends, HTTPException, status

from vhc_offline.application.interfaces import CacheStore
from vhc_offline.application.schemas import ConnectivityResponse
from vhc_offline.application.services import ConnectivityMonitor, PendingOperationReplayer
from vhc_offline.domain.entities import Partition
from vhc_offline.domain.exceptions import StorageUnavailableError
from vhc_offline.infrastructure.dependencies import (
    get_cache_store,
    get_connectivity_monitor,
    get_replayer,
)

router = APIRouter(prefix="/connectivity", tags=["Connectivity"])


@router.get("", response_model=ConnectivityResponse)
async def get_connectivity(
    monitor: ConnectivityMonitor = Depends(get_connectivity_monitor),
    replayer: PendingOperationReplayer = Depends(get_replayer),
    store: CacheStore = Depends(get_cache_store),
) -> ConnectivityResponse:
    try:
        pending = await store.get_all(Partition.PENDING_OPS)
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return ConnectivityResponse(
        online=monitor.is_online,
        pending_operations=len(pending),
        sync_running=replayer.is_running,
    )
