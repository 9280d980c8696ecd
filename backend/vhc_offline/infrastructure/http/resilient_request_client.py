"""Resilient request layer for calls to the VHC server.

Wraps a shared ``httpx.AsyncClient`` (which carries the session cookies)
with the offline policy:

* successful GETs are written through to the local cache;
* when the server cannot be reached, GETs are answered from the cache and
  writes are queued as pending operations;
* a non-2xx answer is the server's decision and is raised as-is, without
  touching the cache or the queue.

There is no retry, backoff or timeout here. Callers that want a deadline
configure it on the httpx client or wrap ``send`` themselves.
"""

import logging
from typing import Any

import httpx

from vhc_offline.application.interfaces import CacheRecord, CacheStore
from vhc_offline.application.services.connectivity_monitor import ConnectivityMonitor
from vhc_offline.application.services.request_routing import RequestRouter, RouteMatch
from vhc_offline.domain.entities import (
    WRITE_METHODS,
    Partition,
    PendingOperation,
    RequestOutcome,
    get_partition_spec,
)
from vhc_offline.domain.exceptions import (
    CacheMissError,
    NetworkFailureError,
    ServerRejectedError,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)

SERVED_FROM_CACHE_HEADER = "X-VHC-Served-From-Cache"
QUEUED_HEADER = "X-VHC-Queued"
QUEUED_MESSAGE = "Request queued for sync when online"


def is_served_from_cache(response: httpx.Response) -> bool:
    """True when the response was synthesized from the local cache."""
    return response.headers.get(SERVED_FROM_CACHE_HEADER) == "true"


def is_queued(response: httpx.Response) -> bool:
    """True when the response stands in for a write queued for later replay."""
    return response.headers.get(QUEUED_HEADER) == "true"


class ResilientRequestClient:
    """Sends requests to the VHC server with cache and queue fallbacks.

    The cache store and HTTP client are injected, so tests can pass an
    in-memory store and an ``httpx.MockTransport``. The connectivity
    monitor is optional: when present it is told about every outcome. A
    known-offline state skips the network attempt only when the monitor has
    a probe; without one, every send tries the network so a reply can mark
    it online again.
    """

    def __init__(
        self,
        cache_store: CacheStore,
        http_client: httpx.AsyncClient,
        *,
        router: RequestRouter | None = None,
        connectivity: ConnectivityMonitor | None = None,
    ):
        self._cache = cache_store
        self._http_client = http_client
        self._router = router or RequestRouter()
        self._connectivity = connectivity

    async def send(self, method: str, url: str, body: Any = None) -> httpx.Response:
        """Perform one request and apply the offline policy to its outcome.

        Returns the live response, a cache-served response, or a queued
        acknowledgement. Raises ServerRejectedError for non-2xx answers and
        NetworkFailureError when no fallback applies.
        """
        method = method.upper()
        outcome = RequestOutcome.PROPAGATED_ERROR
        try:
            try:
                response = await self._attempt(method, url, body)
            except NetworkFailureError as failure:
                response, outcome = await self._fallback(method, url, body, failure)
                return response

            if not response.is_success:
                outcome = RequestOutcome.SERVER_REJECTED
                raise ServerRejectedError(response.status_code, response.text, url)

            if method == "GET":
                await self._write_through(url, response)
            outcome = RequestOutcome.SUCCEEDED
            return response
        finally:
            log = logger.info if outcome is RequestOutcome.SUCCEEDED else logger.warning
            log("%s %s → %s", method, url, outcome.value)

    # ── Network attempt ─────────────────────────────────────────────

    async def _attempt(self, method: str, url: str, body: Any) -> httpx.Response:
        monitor = self._connectivity
        if monitor is not None and monitor.is_offline and monitor.can_probe:
            raise NetworkFailureError(method, url)

        try:
            response = await self._http_client.request(method, url, json=body)
        except httpx.TransportError as exc:
            if self._connectivity is not None:
                await self._connectivity.mark_offline()
            raise NetworkFailureError(method, url, exc) from exc

        if self._connectivity is not None:
            await self._connectivity.mark_online()
        return response

    async def _fallback(
        self, method: str, url: str, body: Any, failure: NetworkFailureError
    ) -> tuple[httpx.Response, RequestOutcome]:
        """Answer a request that could not reach the server, or re-raise failure."""
        if method == "GET":
            payload = await self._read_cache(url)
            if payload is None:
                raise failure
            if isinstance(payload, dict):
                payload = {**payload, "servedFromCache": True}
            response = self._synthesize(method, url, payload, SERVED_FROM_CACHE_HEADER)
            return response, RequestOutcome.SERVED_FROM_CACHE

        if method in WRITE_METHODS:
            operation_id = await self._enqueue(method, url, body)
            if operation_id is None:
                raise failure
            payload = {"queued": True, "operationId": operation_id, "message": QUEUED_MESSAGE}
            response = self._synthesize(method, url, payload, QUEUED_HEADER)
            return response, RequestOutcome.QUEUED

        raise failure

    # ── Cache ───────────────────────────────────────────────────────

    async def _read_cache(self, url: str) -> CacheRecord | list[CacheRecord] | None:
        """Cached payload for url, or None when there is nothing usable."""
        try:
            return await self._lookup(url)
        except CacheMissError as exc:
            logger.info("%s", exc)
        except (ValueError, StorageUnavailableError) as exc:
            logger.warning("Cache read for %s failed: %s", url, exc)
        return None

    async def _lookup(self, url: str) -> CacheRecord | list[CacheRecord]:
        match = self._router.resolve(url)
        if match is None or not match.cacheable:
            raise CacheMissError(url)

        if match.is_collection:
            records = await self._cache.get_all(match.partition)
            # an empty list is indistinguishable from never having cached one
            if not records:
                raise CacheMissError(url)
            return records

        record = await self._cache.get(match.partition, match.key)
        if record is None:
            raise CacheMissError(url)
        return record

    async def _write_through(self, url: str, response: httpx.Response) -> None:
        """Mirror a successful GET into the cache. Failures are logged, never raised."""
        match = self._router.resolve(url)
        if match is None or not match.cacheable:
            return
        try:
            payload = response.json()
            stored = await self._store_payload(match, payload)
        except (ValueError, StorageUnavailableError) as exc:
            logger.warning("Could not cache response for %s: %s", url, exc)
            return
        logger.debug("Cached %d record(s) from %s", stored, url)

    async def _store_payload(self, match: RouteMatch, payload: Any) -> int:
        spec = get_partition_spec(match.partition)

        if match.is_collection:
            if not isinstance(payload, list):
                raise ValueError(f"expected a list for {match.path}, got {type(payload).__name__}")
            stored = 0
            for item in payload:
                if isinstance(item, dict) and item.get(spec.key_path) is not None:
                    await self._cache.put(match.partition, item)
                    stored += 1
            return stored

        if not isinstance(payload, dict):
            raise ValueError(f"expected an object for {match.path}, got {type(payload).__name__}")
        await self._cache.put(match.partition, {spec.key_path: match.key, **payload})
        return 1

    # ── Queue ───────────────────────────────────────────────────────

    async def _enqueue(self, method: str, url: str, body: Any) -> int | None:
        """Queue a write for replay; returns its id, or None if it could not be stored."""
        operation = PendingOperation(
            type=self._router.classify(method, url),
            endpoint=url,
            method=method,
            data=body,
        )
        try:
            operation_id = await self._cache.put(Partition.PENDING_OPS, operation.to_record())
        except (ValueError, StorageUnavailableError) as exc:
            logger.error("Could not queue %s %s: %s", method, url, exc)
            return None
        logger.info("Queued %s %s as %s (#%s)", method, url, operation.type.value, operation_id)
        return int(operation_id)

    def _synthesize(
        self, method: str, url: str, payload: Any, marker_header: str
    ) -> httpx.Response:
        request = self._http_client.build_request(method, url)
        return httpx.Response(
            200,
            json=payload,
            headers={marker_header: "true"},
            request=request,
        )
