"""Reachability probe for the VHC server, used by the ConnectivityMonitor."""

import logging

import httpx

logger = logging.getLogger(__name__)


class HttpConnectivityProbe:
    """Callable probe: True when the server answered at all.

    Any HTTP response, including an error status, proves the network path
    works. Only transport failures count as offline.
    """

    def __init__(self, http_client: httpx.AsyncClient, path: str = "/api/ping"):
        self._http_client = http_client
        self._path = path

    async def __call__(self) -> bool:
        try:
            response = await self._http_client.get(self._path)
        except httpx.TransportError as exc:
            logger.debug("Probe %s failed: %s: %s", self._path, type(exc).__name__, exc)
            return False
        logger.debug("Probe %s answered %d", self._path, response.status_code)
        return True
