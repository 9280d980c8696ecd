from .cache_record import CacheRecordModel
from .pending_operation import PendingOperationModel
from .store_metadata import StoreMetadataModel

__all__ = [
    "CacheRecordModel",
    "PendingOperationModel",
    "StoreMetadataModel",
]
