"""Outbound HTTP to the VHC server."""

from .connectivity_probe import HttpConnectivityProbe
from .resilient_request_client import (
    QUEUED_HEADER,
    SERVED_FROM_CACHE_HEADER,
    ResilientRequestClient,
    is_queued,
    is_served_from_cache,
)

__all__ = [
    "HttpConnectivityProbe",
    "ResilientRequestClient",
    "SERVED_FROM_CACHE_HEADER",
    "QUEUED_HEADER",
    "is_served_from_cache",
    "is_queued",
]
