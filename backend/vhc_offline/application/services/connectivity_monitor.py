"""Connectivity monitor: tracks whether the VHC server is reachable.

State changes come from two places: request outcomes reported by the
resilient request client, and a periodic probe loop. Every offline→online
transition fires the registered reconnect callbacks (replay of queued
writes is one of them).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Probe = Callable[[], Awaitable[bool]]
Callback = Callable[[], Awaitable[object]]


class ConnectivityMonitor:
    """Online/offline state with transition callbacks and an optional probe loop.

    Callbacks run as background tasks so the caller that reported the
    transition (often an in-flight request) is not held up by them.
    """

    def __init__(
        self,
        probe: Probe | None = None,
        *,
        interval: float = 15.0,
        initially_online: bool = True,
    ) -> None:
        self._probe = probe
        self._interval = interval
        self._online = initially_online
        self._reconnect_callbacks: list[Callback] = []
        self._disconnect_callbacks: list[Callback] = []
        self._callback_tasks: set[asyncio.Task] = set()
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def is_online(self) -> bool:
        return self._online

    @property
    def is_offline(self) -> bool:
        return not self._online

    @property
    def can_probe(self) -> bool:
        """True when a probe can bring the state back online without a request."""
        return self._probe is not None

    def on_reconnect(self, callback: Callback) -> None:
        self._reconnect_callbacks.append(callback)

    def on_disconnect(self, callback: Callback) -> None:
        self._disconnect_callbacks.append(callback)

    async def mark_online(self) -> None:
        if self._online:
            return
        self._online = True
        logger.info("Connectivity restored")
        self._fire(self._reconnect_callbacks)

    async def mark_offline(self) -> None:
        if not self._online:
            return
        self._online = False
        logger.warning("Connectivity lost, serving reads from cache and queueing writes")
        self._fire(self._disconnect_callbacks)

    async def check(self) -> bool:
        """Run the probe once and update the state. Returns the new state."""
        if self._probe is None:
            return self._online
        try:
            reachable = await self._probe()
        except Exception:
            logger.exception("Connectivity probe raised")
            reachable = False
        if reachable:
            await self.mark_online()
        else:
            await self.mark_offline()
        return self._online

    async def wait_for_callbacks(self) -> None:
        """Wait until every callback fired so far has finished."""
        while self._callback_tasks:
            await asyncio.gather(*list(self._callback_tasks), return_exceptions=True)

    def _fire(self, callbacks: list[Callback]) -> None:
        for callback in callbacks:
            task = asyncio.create_task(self._run_callback(callback))
            self._callback_tasks.add(task)
            task.add_done_callback(self._callback_tasks.discard)

    @staticmethod
    async def _run_callback(callback: Callback) -> None:
        try:
            await callback()
        except Exception:
            logger.exception("Connectivity callback %r failed", callback)

    # ── Probe loop ──────────────────────────────────────────────────

    async def start(self) -> None:
        """Start the background probe loop (no-op without a probe)."""
        if self._probe is None or self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("ConnectivityMonitor started (every %.0fs)", self._interval)

    async def stop(self) -> None:
        """Stop the probe loop and wait for running callbacks."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self.wait_for_callbacks()
        logger.info("ConnectivityMonitor stopped")

    async def _loop(self) -> None:
        while self._running:
            try:
                await self.check()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("ConnectivityMonitor probe error")

            await asyncio.sleep(self._interval)
