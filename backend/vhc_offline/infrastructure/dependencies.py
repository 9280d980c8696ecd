"""FastAPI dependency injection: hands the components built in the lifespan to endpoints.

Everything lives on ``app.state``; tests swap components through
``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from vhc_offline.application.interfaces import CacheStore
from vhc_offline.application.services import (
    ConnectivityMonitor,
    OfflineCacheService,
    PendingOperationReplayer,
)
from vhc_offline.infrastructure.http import ResilientRequestClient


def get_cache_store(request: Request) -> CacheStore:
    return request.app.state.cache_store


def get_offline_cache_service(
    cache_store: CacheStore = Depends(get_cache_store),
) -> OfflineCacheService:
    """Provides the typed accessors over the shared cache store."""
    return OfflineCacheService(cache_store)


def get_request_client(request: Request) -> ResilientRequestClient:
    return request.app.state.request_client


def get_replayer(request: Request) -> PendingOperationReplayer:
    return request.app.state.replayer


def get_connectivity_monitor(request: Request) -> ConnectivityMonitor:
    return request.app.state.connectivity
