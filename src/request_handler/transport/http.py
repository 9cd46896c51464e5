"""
Transport seam — performs a `Request` and hands back the raw body and response.

Any async callable with the `Transport` signature can stand in for the default,
which is how tests swap the network out.
"""

from typing import Any, Awaitable, Callable, Optional

import httpx

from request_handler.models.request import HTTPResponse, Request

Transport = Callable[[Request], Awaitable[tuple[bytes, Any]]]


class HttpxTransport:
    """Pass-through to httpx with its default timeout and redirect behaviour.

    With no `client`, each call opens and closes its own `httpx.AsyncClient`.
    An injected client is borrowed and never closed here.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client

    async def __call__(self, request: Request) -> tuple[bytes, HTTPResponse]:
        if self._client is not None:
            return await self._perform(self._client, request)
        async with httpx.AsyncClient() as client:
            return await self._perform(client, request)

    @staticmethod
    async def _perform(client: httpx.AsyncClient, request: Request) -> tuple[bytes, HTTPResponse]:
        resp = await client.request(
            request.method,
            request.url or "",
            headers=request.headers,
            content=request.body,
        )
        return resp.content, HTTPResponse(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            url=str(resp.url),
        )


default_transport: Transport = HttpxTransport()
