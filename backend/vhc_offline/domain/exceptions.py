"""Domain-specific exceptions: framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class StorageUnavailableError(Exception):
    """Raised when the local cache store cannot be opened or a transaction fails."""

    def __init__(self, store_name: str, reason: str):
        self.store_name = store_name
        self.reason = reason
        super().__init__(f"Local store '{store_name}' unavailable: {reason}")


class ServerRejectedError(Exception):
    """Raised when the VHC server answers with a non-2xx status.

    Carries the status code and the raw body text. Never cached or queued.
    """

    def __init__(self, status_code: int, body: str, url: str = ""):
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(f"{status_code}: {body}")


class NetworkFailureError(Exception):
    """Raised when no response could be obtained (offline or transport error)."""

    def __init__(self, method: str, url: str, cause: Exception | None = None):
        self.method = method
        self.url = url
        self.cause = cause
        reason = f"{type(cause).__name__}: {cause}" if cause else "client is offline"
        super().__init__(f"{method} {url} failed: {reason}")


class CacheMissError(Exception):
    """Internal: a read fallback found nothing cached for the URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"No cached data for {url}")
