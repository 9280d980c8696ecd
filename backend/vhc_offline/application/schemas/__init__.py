from .assessment import AssessmentRequest, AssessmentResponse
from .cache import CacheListResponse
from .connectivity import ConnectivityResponse
from .pending_operation import PendingOperationResponse, SyncReportResponse

__all__ = [
    "AssessmentRequest",
    "AssessmentResponse",
    "CacheListResponse",
    "ConnectivityResponse",
    "PendingOperationResponse",
    "SyncReportResponse",
]
