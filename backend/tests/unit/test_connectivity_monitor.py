"""Unit tests for the ConnectivityMonitor and the HTTP reachability probe."""

import asyncio

import pytest

from vhc_offline.application.services import ConnectivityMonitor
from vhc_offline.infrastructure.http import HttpConnectivityProbe


class _CountingCallback:
    def __init__(self):
        self.calls = 0

    async def __call__(self):
        self.calls += 1


@pytest.mark.asyncio
async def test_reconnect_fires_only_on_offline_to_online():
    monitor = ConnectivityMonitor()
    callback = _CountingCallback()
    monitor.on_reconnect(callback)

    await monitor.mark_online()
    await monitor.wait_for_callbacks()
    assert callback.calls == 0

    await monitor.mark_offline()
    await monitor.mark_online()
    await monitor.mark_online()
    await monitor.wait_for_callbacks()
    assert callback.calls == 1
    assert monitor.is_online


@pytest.mark.asyncio
async def test_disconnect_callback():
    monitor = ConnectivityMonitor()
    callback = _CountingCallback()
    monitor.on_disconnect(callback)

    await monitor.mark_offline()
    await monitor.mark_offline()
    await monitor.wait_for_callbacks()

    assert callback.calls == 1
    assert monitor.is_offline


@pytest.mark.asyncio
async def test_failing_callback_is_contained():
    monitor = ConnectivityMonitor(initially_online=False)

    async def broken():
        raise RuntimeError("replay blew up")

    after = _CountingCallback()
    monitor.on_reconnect(broken)
    monitor.on_reconnect(after)

    await monitor.mark_online()
    await monitor.wait_for_callbacks()

    assert after.calls == 1
    assert monitor.is_online


@pytest.mark.asyncio
async def test_check_uses_probe_result():
    results = [False, True]

    async def probe():
        return results.pop(0)

    monitor = ConnectivityMonitor(probe)
    callback = _CountingCallback()
    monitor.on_reconnect(callback)

    assert await monitor.check() is False
    assert await monitor.check() is True
    await monitor.wait_for_callbacks()
    assert callback.calls == 1


@pytest.mark.asyncio
async def test_probe_exception_counts_as_offline():
    async def probe():
        raise OSError("no route to host")

    monitor = ConnectivityMonitor(probe)

    assert await monitor.check() is False
    assert monitor.is_offline


@pytest.mark.asyncio
async def test_check_without_probe_keeps_state():
    monitor = ConnectivityMonitor(initially_online=False)
    assert await monitor.check() is False


@pytest.mark.asyncio
async def test_probe_loop_runs_until_stopped():
    probes = _CountingCallback()

    async def probe():
        await probes()
        return True

    monitor = ConnectivityMonitor(probe, interval=0.01)
    await monitor.start()
    await asyncio.sleep(0.05)
    await monitor.stop()
    calls_at_stop = probes.calls
    await asyncio.sleep(0.03)

    assert calls_at_stop >= 1
    assert probes.calls == calls_at_stop


# ── HttpConnectivityProbe ──


@pytest.mark.asyncio
async def test_http_probe_any_response_is_online(server):
    server.respond("GET", "/api/ping", 401, text="Unauthorized")
    probe = HttpConnectivityProbe(server.client(), "/api/ping")

    assert await probe() is True


@pytest.mark.asyncio
async def test_http_probe_transport_error_is_offline(server):
    server.offline = True
    probe = HttpConnectivityProbe(server.client())

    assert await probe() is False
