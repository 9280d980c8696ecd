from .cache_store import CacheStore, CacheKey, CacheRecord

__all__ = [
    "CacheStore",
    "CacheKey",
    "CacheRecord",
]
