"""Shared fixtures: an in-memory CacheStore and a scripted VHC server."""

from typing import Any

import httpx
import pytest

from vhc_offline.application.interfaces import CacheKey, CacheRecord, CacheStore
from vhc_offline.domain.entities import Partition, PartitionSpec, capture_timestamp, get_partition_spec
from vhc_offline.domain.exceptions import StorageUnavailableError


class InMemoryCacheStore(CacheStore):
    """In-memory fake of the cache store port for unit testing.

    Set ``unavailable`` to make every call fail as if the database could
    not be opened.
    """

    def __init__(self):
        self.partitions: dict[Partition, dict[CacheKey, CacheRecord]] = {p: {} for p in Partition}
        self.unavailable = False
        self._next_op_id = 1

    def _check(self) -> None:
        if self.unavailable:
            raise StorageUnavailableError("memory", "store is closed")

    @staticmethod
    def _key(spec: PartitionSpec, key: CacheKey) -> CacheKey | None:
        if spec.auto_increment:
            try:
                return int(key)
            except (TypeError, ValueError):
                return None
        return str(key)

    async def initialize(self) -> None:
        self._check()

    async def get(self, partition, key):
        self._check()
        spec = get_partition_spec(partition)
        record = self.partitions[spec.partition].get(self._key(spec, key))
        return dict(record) if record is not None else None

    async def get_all(self, partition):
        self._check()
        spec = get_partition_spec(partition)
        rows = self.partitions[spec.partition]
        return [dict(rows[k]) for k in sorted(rows)]

    async def get_all_by_index(self, partition, index_name, value):
        self._check()
        spec = get_partition_spec(partition)
        if index_name not in spec.indexes:
            raise ValueError(f"Partition '{spec.partition.value}' has no index '{index_name}'")
        value = getattr(value, "value", value)
        return [r for r in await self.get_all(partition) if r.get(index_name) == value]

    async def put(self, partition, record):
        self._check()
        spec = get_partition_spec(partition)
        stored = {**record, "timestamp": capture_timestamp()}
        if spec.auto_increment:
            key = stored.get("id")
            if key is None:
                key = self._next_op_id
                self._next_op_id += 1
            stored["id"] = key
            existing = self.partitions[spec.partition].get(int(key))
            if existing is not None:
                stored["timestamp"] = existing["timestamp"]
            self.partitions[spec.partition][int(key)] = stored
            return key
        key = stored.get(spec.key_path)
        if key is None or key == "":
            raise ValueError(f"Record is missing key '{spec.key_path}'")
        self.partitions[spec.partition][str(key)] = stored
        return key

    async def delete(self, partition, key):
        self._check()
        spec = get_partition_spec(partition)
        self.partitions[spec.partition].pop(self._key(spec, key), None)

    async def clear_all(self):
        self._check()
        for rows in self.partitions.values():
            rows.clear()


class ScriptedServer:
    """Stand-in for the VHC server behind an ``httpx.MockTransport``.

    Responses are looked up by (method, path); ``offline`` makes every
    request fail with a connection error. Every request that reached the
    server is kept in ``requests``.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], httpx.Response] = {}
        self.offline = False
        self.requests: list[httpx.Request] = []

    def respond(
        self, method: str, path: str, status_code: int = 200, *, json: Any = None, text: str = ""
    ) -> None:
        if json is not None:
            response = httpx.Response(status_code, json=json)
        else:
            response = httpx.Response(status_code, text=text)
        self.routes[(method.upper(), path)] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.offline:
            raise httpx.ConnectError("Network is unreachable", request=request)
        self.requests.append(request)
        scripted = self.routes.get((request.method, request.url.path))
        if scripted is None:
            return httpx.Response(404, text="Not Found")
        return httpx.Response(
            scripted.status_code, headers=scripted.headers, content=scripted.content
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self.handler), base_url="http://vhc.test"
        )


@pytest.fixture
def memory_store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def server() -> ScriptedServer:
    return ScriptedServer()
