"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vhc_offline.application.services import ConnectivityMonitor, PendingOperationReplayer
from vhc_offline.config import Settings, get_settings
from vhc_offline.infrastructure.database.repositories import SQLAlchemyCacheStore
from vhc_offline.infrastructure.http import HttpConnectivityProbe, ResilientRequestClient
from vhc_offline.infrastructure.logging.log_config import setup_logging
from vhc_offline.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


def _build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Shared client for the VHC server; its cookie jar carries the session."""
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=httpx.Timeout(settings.api_timeout_seconds),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: open the cache, wire the request layer, start monitoring."""
    settings = get_settings()
    setup_logging()

    # 1. Open the local cache store (creates partitions, checks schema version)
    cache_store = SQLAlchemyCacheStore(
        settings.cache_database_url,
        store_name=settings.cache_store_name,
        schema_version=settings.cache_schema_version,
    )
    await cache_store.initialize()

    # 2. Outbound HTTP, connectivity and replay
    http_client = _build_http_client(settings)
    connectivity = ConnectivityMonitor(
        HttpConnectivityProbe(http_client, settings.connectivity_probe_path),
        interval=settings.connectivity_probe_interval,
        initially_online=False,
    )
    replayer = PendingOperationReplayer(
        cache_store,
        http_client,
        max_attempts=settings.sync_max_attempts,
    )
    if settings.sync_on_reconnect:
        connectivity.on_reconnect(replayer.replay)

    app.state.cache_store = cache_store
    app.state.http_client = http_client
    app.state.connectivity = connectivity
    app.state.replayer = replayer
    app.state.request_client = ResilientRequestClient(
        cache_store, http_client, connectivity=connectivity
    )

    # 3. Start probing. The monitor starts offline, so the first successful probe
    #    counts as a reconnect and drains writes queued in an earlier session.
    await connectivity.start()
    logger.info("VHC offline sync ready (server %s)", settings.api_base_url)

    yield

    # Shutdown
    await connectivity.stop()
    await http_client.aclose()
    await cache_store.close()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vhc_offline.main:app",
        host="127.0.0.1",
        port=8020,
        reload=True,
    )
