"""Forwards UI calls to the VHC server through the resilient request layer.

The UI talks to ``/api/v1/proxy/api/...`` instead of the server directly, so
reads fall back to the local cache and writes are queued while offline.
"""

import json

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from vhc_offline.domain.exceptions import NetworkFailureError, ServerRejectedError
from vhc_offline.infrastructure.dependencies import get_request_client
from vhc_offline.infrastructure.http import (
    QUEUED_HEADER,
    SERVED_FROM_CACHE_HEADER,
    ResilientRequestClient,
)

router = APIRouter(prefix="/proxy", tags=["Proxy"])

_MARKER_HEADERS = (SERVED_FROM_CACHE_HEADER, QUEUED_HEADER)


@router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def forward(
    path: str,
    request: Request,
    client: ResilientRequestClient = Depends(get_request_client),
) -> Response:
    raw_body = await request.body()
    body = None
    if raw_body:
        try:
            body = json.loads(raw_body)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be JSON"
            )

    url = f"/{path}"
    if request.url.query:
        url = f"{url}?{request.url.query}"

    try:
        upstream = await client.send(request.method, url, body)
    except ServerRejectedError as e:
        code = e.status_code if e.status_code >= 400 else status.HTTP_502_BAD_GATEWAY
        raise HTTPException(status_code=code, detail=e.body)
    except NetworkFailureError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    headers = {name: upstream.headers[name] for name in _MARKER_HEADERS if name in upstream.headers}
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type"),
        headers=headers,
    )
