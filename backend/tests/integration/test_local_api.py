"""Integration tests for the local API, wired to an in-memory store and a scripted server."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from vhc_offline.application.services import ConnectivityMonitor, PendingOperationReplayer
from vhc_offline.domain.entities import OperationKind, Partition, PendingOperation
from vhc_offline.infrastructure.dependencies import (
    get_cache_store,
    get_connectivity_monitor,
    get_replayer,
    get_request_client,
)
from vhc_offline.infrastructure.http import QUEUED_HEADER, SERVED_FROM_CACHE_HEADER, ResilientRequestClient
from vhc_offline.main import create_app


@pytest_asyncio.fixture
async def api(memory_store, server):
    app = create_app()
    http_client = server.client()
    monitor = ConnectivityMonitor()
    replayer = PendingOperationReplayer(memory_store, http_client)
    request_client = ResilientRequestClient(memory_store, http_client, connectivity=monitor)

    app.dependency_overrides[get_cache_store] = lambda: memory_store
    app.dependency_overrides[get_connectivity_monitor] = lambda: monitor
    app.dependency_overrides[get_replayer] = lambda: replayer
    app.dependency_overrides[get_request_client] = lambda: request_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await http_client.aclose()


# ── Cache ──


@pytest.mark.asyncio
async def test_list_partition(api, memory_store):
    await memory_store.put(Partition.JOBS, {"id": "J1", "userId": "u1"})
    await memory_store.put(Partition.JOBS, {"id": "J2", "userId": "u2"})

    response = await api.get("/api/v1/cache/jobs")

    assert response.status_code == 200
    data = response.json()
    assert data["partition"] == "jobs"
    assert data["count"] == 2


@pytest.mark.asyncio
async def test_list_partition_by_index(api, memory_store):
    await memory_store.put(Partition.JOBS, {"id": "J1", "userId": 12})
    await memory_store.put(Partition.JOBS, {"id": "J2", "userId": "12"})
    await memory_store.put(Partition.JOBS, {"id": "J3", "userId": 13})

    response = await api.get("/api/v1/cache/jobs", params={"index": "userId", "value": "12"})

    assert response.status_code == 200
    assert sorted(r["id"] for r in response.json()["records"]) == ["J1", "J2"]


@pytest.mark.asyncio
async def test_unknown_partition_is_404(api):
    response = await api.get("/api/v1/cache/invoices")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_undeclared_index_is_400(api):
    response = await api.get("/api/v1/cache/vehicles", params={"index": "make", "value": "Ford"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_index_without_value_is_400(api):
    response = await api.get("/api/v1/cache/jobs", params={"index": "userId"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_and_delete_record(api, memory_store):
    await memory_store.put(Partition.VEHICLES, {"vrm": "AB12CDE", "make": "Ford"})

    found = await api.get("/api/v1/cache/vehicles/AB12CDE")
    deleted = await api.delete("/api/v1/cache/vehicles/AB12CDE")
    deleted_again = await api.delete("/api/v1/cache/vehicles/AB12CDE")
    missing = await api.get("/api/v1/cache/vehicles/AB12CDE")

    assert found.status_code == 200
    assert found.json()["make"] == "Ford"
    assert deleted.status_code == 204
    assert deleted_again.status_code == 204
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_clear_cache(api, memory_store):
    await memory_store.put(Partition.JOBS, {"id": "J1"})
    await memory_store.put(Partition.PENDING_OPS, {"endpoint": "/api/jobs", "method": "POST"})

    response = await api.delete("/api/v1/cache")

    assert response.status_code == 204
    assert all(not rows for rows in memory_store.partitions.values())


@pytest.mark.asyncio
async def test_unavailable_store_is_503(api, memory_store):
    memory_store.unavailable = True

    response = await api.get("/api/v1/cache/jobs")

    assert response.status_code == 503


# ── Pending operations & connectivity ──


@pytest.mark.asyncio
async def test_list_and_sync_pending_operations(api, memory_store, server):
    operation = PendingOperation(
        type=OperationKind.UPDATE_JOB, endpoint="/api/jobs/7", method="PUT", data={"status": "closed"}
    )
    op_id = await memory_store.put(Partition.PENDING_OPS, operation.to_record())
    server.respond("PUT", "/api/jobs/7", json={"id": 7})

    listed = await api.get("/api/v1/pending-operations")
    synced = await api.post("/api/v1/pending-operations/sync")

    assert listed.status_code == 200
    assert listed.json()[0]["id"] == op_id
    assert listed.json()[0]["type"] == "UPDATE_JOB"
    assert synced.status_code == 200
    assert synced.json()["replayed"] == [op_id]
    assert synced.json()["remaining"] == 0


@pytest.mark.asyncio
async def test_connectivity_state(api, memory_store):
    await memory_store.put(Partition.PENDING_OPS, {"endpoint": "/api/jobs", "method": "POST"})

    response = await api.get("/api/v1/connectivity")

    assert response.status_code == 200
    assert response.json() == {"online": True, "pending_operations": 1, "sync_running": False}


# ── Assessments ──


@pytest.mark.asyncio
async def test_assess_brakes(api):
    fields = {"frontBrakes": {"padThickness": "poor"}}

    response = await api.post("/api/v1/assessments/brakes", json={"fields": fields})

    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "brakes"
    assert data["status"] == "fail"
    assert data["reasons"] == ["frontBrakes.padThickness is poor"]


@pytest.mark.asyncio
async def test_assess_tyres_returns_derived_fields(api):
    tyres = [{"innerTread": 3, "middleTread": 4, "outerTread": 4}]

    response = await api.post("/api/v1/assessments/tyres", json={"fields": {"tyres": tyres}})

    data = response.json()
    assert data["status"] == "advisory"
    assert data["fields"]["tyres"][0]["photoRequired"] is True


@pytest.mark.asyncio
async def test_assess_unknown_category_is_404(api):
    response = await api.post("/api/v1/assessments/bodywork", json={"fields": {}})
    assert response.status_code == 404


# ── Proxy ──


@pytest.mark.asyncio
async def test_proxy_online_get_passes_through_and_caches(api, memory_store, server):
    server.respond("GET", "/api/jobs/7", json={"id": 7, "status": "open"})

    response = await api.get("/api/v1/proxy/api/jobs/7")

    assert response.status_code == 200
    assert response.json() == {"id": 7, "status": "open"}
    assert SERVED_FROM_CACHE_HEADER not in response.headers
    assert await memory_store.get(Partition.JOBS, 7) is not None


@pytest.mark.asyncio
async def test_proxy_offline_get_served_from_cache(api, memory_store, server):
    await memory_store.put(Partition.JOBS, {"id": 7, "status": "open"})
    server.offline = True

    response = await api.get("/api/v1/proxy/api/jobs/7")

    assert response.status_code == 200
    assert response.headers[SERVED_FROM_CACHE_HEADER] == "true"
    assert response.json()["servedFromCache"] is True


@pytest.mark.asyncio
async def test_proxy_offline_write_is_queued(api, memory_store, server):
    server.offline = True

    response = await api.post("/api/v1/proxy/api/jobs", json={"vrm": "AB12CDE"})

    assert response.status_code == 200
    assert response.headers[QUEUED_HEADER] == "true"
    pending = await memory_store.get_all(Partition.PENDING_OPS)
    assert pending[0]["type"] == "CREATE_JOB"
    assert pending[0]["data"] == {"vrm": "AB12CDE"}


@pytest.mark.asyncio
async def test_proxy_keeps_server_rejection_status(api, server):
    server.respond("PUT", "/api/jobs/7", 422, text="invalid status")

    response = await api.put("/api/v1/proxy/api/jobs/7", json={"status": "??"})

    assert response.status_code == 422
    assert response.json()["detail"] == "invalid status"


@pytest.mark.asyncio
async def test_proxy_offline_uncached_get_is_503(api, server):
    server.offline = True

    response = await api.get("/api/v1/proxy/api/jobs/99")

    assert response.status_code == 503
