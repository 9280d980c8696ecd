from .connectivity_monitor import ConnectivityMonitor
from .offline_cache_service import OfflineCacheService
from .pending_operation_replayer import PendingOperationReplayer
from .request_routing import DEFAULT_ROUTES, RequestRouter, Route, RouteMatch

__all__ = [
    "ConnectivityMonitor",
    "OfflineCacheService",
    "PendingOperationReplayer",
    "RequestRouter",
    "Route",
    "RouteMatch",
    "DEFAULT_ROUTES",
]
