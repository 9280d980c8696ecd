"""Pydantic DTOs for the local cache endpoints."""

from typing import Any

from pydantic import BaseModel


class CacheListResponse(BaseModel):
    """Records from one partition, optionally filtered by an index."""

    partition: str
    index: str | None = None
    count: int
    records: list[dict[str, Any]]
