"""Queued writes and their replay against the VHC server."""

from fastapi import APIRouter, Depends, HTTPException, status

from vhc_offline.application.schemas import PendingOperationResponse, SyncReportResponse
from vhc_offline.application.services import OfflineCacheService, PendingOperationReplayer
from vhc_offline.domain.entities import PendingOperation
from vhc_offline.domain.exceptions import StorageUnavailableError
from vhc_offline.infrastructure.dependencies import get_offline_cache_service, get_replayer

router = APIRouter(prefix="/pending-operations", tags=["Pending Operations"])


def _to_response(operation: PendingOperation) -> PendingOperationResponse:
    return PendingOperationResponse(
        id=operation.id,
        type=operation.type.value,
        endpoint=operation.endpoint,
        method=operation.method,
        data=operation.data,
        timestamp=operation.timestamp,
        attempts=operation.attempts,
        last_error=operation.last_error,
    )


@router.get("", response_model=list[PendingOperationResponse])
async def list_pending_operations(
    service: OfflineCacheService = Depends(get_offline_cache_service),
) -> list[PendingOperationResponse]:
    """Queued writes in replay order."""
    try:
        operations = await service.get_pending_operations()
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return [_to_response(op) for op in operations]


@router.post("/sync", response_model=SyncReportResponse)
async def sync_pending_operations(
    replayer: PendingOperationReplayer = Depends(get_replayer),
) -> SyncReportResponse:
    """Replay the queue now instead of waiting for a reconnect."""
    try:
        report = await replayer.replay()
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return SyncReportResponse.model_validate(report, from_attributes=True)
