"""Domain entity: terminal states of one resilient request."""

from enum import Enum


class RequestOutcome(str, Enum):
    """Where a single `send` ended up.

    ATTEMPTING resolves to SUCCEEDED, SERVER_REJECTED, or a network failure;
    a network failure resolves to SERVED_FROM_CACHE, QUEUED or PROPAGATED_ERROR.
    """

    SUCCEEDED = "succeeded"
    SERVER_REJECTED = "server_rejected"
    SERVED_FROM_CACHE = "served_from_cache"
    QUEUED = "queued"
    PROPAGATED_ERROR = "propagated_error"
