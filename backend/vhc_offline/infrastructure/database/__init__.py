from .base import Base
from .session import create_cache_engine, create_session_factory, sqlite_database_path
from .models import CacheRecordModel, PendingOperationModel, StoreMetadataModel

__all__ = [
    "Base",
    "create_cache_engine",
    "create_session_factory",
    "sqlite_database_path",
    "CacheRecordModel",
    "PendingOperationModel",
    "StoreMetadataModel",
]
