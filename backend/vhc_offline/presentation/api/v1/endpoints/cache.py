"""Raw access to the local cache partitions."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from vhc_offline.application.interfaces import CacheRecord, CacheStore
from vhc_offline.application.schemas import CacheListResponse
from vhc_offline.domain.entities import PartitionSpec, get_partition_spec
from vhc_offline.domain.exceptions import EntityNotFoundError, StorageUnavailableError
from vhc_offline.infrastructure.dependencies import get_cache_store

router = APIRouter(prefix="/cache", tags=["Cache"])


def _resolve_partition(partition: str) -> PartitionSpec:
    try:
        return get_partition_spec(partition)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _unavailable(e: StorageUnavailableError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


def _query_candidates(value: str) -> list[Any]:
    """Query strings are untyped; numeric values may be stored as numbers or strings."""
    candidates: list[Any] = [value]
    try:
        candidates.append(int(value))
    except ValueError:
        pass
    return candidates


@router.get("/{partition}", response_model=CacheListResponse)
async def list_partition(
    partition: str,
    index: str | None = Query(None, description="Secondary index to filter on"),
    value: str | None = Query(None, description="Value the indexed field must equal"),
    store: CacheStore = Depends(get_cache_store),
) -> CacheListResponse:
    """All records in a partition, or those matching an index lookup."""
    spec = _resolve_partition(partition)
    if (index is None) != (value is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="'index' and 'value' must be given together",
        )

    try:
        if index is None:
            records = await store.get_all(spec.partition)
        else:
            records = []
            seen: set[str] = set()
            for candidate in _query_candidates(value):
                for record in await store.get_all_by_index(spec.partition, index, candidate):
                    key = str(record.get(spec.key_path))
                    if key not in seen:
                        seen.add(key)
                        records.append(record)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageUnavailableError as e:
        raise _unavailable(e)

    return CacheListResponse(
        partition=spec.partition.value, index=index, count=len(records), records=records
    )


@router.get("/{partition}/{key}")
async def get_record(
    partition: str,
    key: str,
    store: CacheStore = Depends(get_cache_store),
) -> CacheRecord:
    spec = _resolve_partition(partition)
    try:
        record = await store.get(spec.partition, key)
    except StorageUnavailableError as e:
        raise _unavailable(e)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(EntityNotFoundError(spec.partition.value, key)),
        )
    return record


@router.delete("/{partition}/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(
    partition: str,
    key: str,
    store: CacheStore = Depends(get_cache_store),
) -> None:
    """Remove one record. Deleting an absent key succeeds."""
    spec = _resolve_partition(partition)
    try:
        await store.delete(spec.partition, key)
    except StorageUnavailableError as e:
        raise _unavailable(e)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cache(store: CacheStore = Depends(get_cache_store)) -> None:
    """Wipe every partition, including queued writes."""
    try:
        await store.clear_all()
    except StorageUnavailableError as e:
        raise _unavailable(e)
