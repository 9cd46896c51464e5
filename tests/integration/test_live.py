"""
Integration tests for request-handler — real requests through the default httpx transport.

Requires environment variables:
  REQUEST_HANDLER_INTEGRATION  — set to enable
  REQUEST_HANDLER_BASE_URL     — (optional) httpbin-compatible service, defaults to https://httpbin.org

Run: REQUEST_HANDLER_INTEGRATION=1 pytest tests/integration/ -v
"""

import os
from typing import Any

import pytest

from request_handler import Handler, HttpError, Request

SKIP = not os.environ.get("REQUEST_HANDLER_INTEGRATION")
BASE_URL = os.environ.get("REQUEST_HANDLER_BASE_URL", "https://httpbin.org").rstrip("/")

pytestmark = pytest.mark.skipif(SKIP, reason="REQUEST_HANDLER_INTEGRATION not set")


class TestDefaultTransport:
    @pytest.mark.asyncio
    async def test_bare_json(self):
        handler = Handler(debug=True)
        result = await handler.send(Request(url=f"{BASE_URL}/json"), dict[str, Any])
        assert "slideshow" in result

    @pytest.mark.asyncio
    async def test_post_echo(self):
        handler = Handler(debug=True)
        result = await handler.send(
            Request.with_json(f"{BASE_URL}/post", {"hello": "world"}), dict[str, Any],
        )
        assert result["json"] == {"hello": "world"}

    @pytest.mark.asyncio
    async def test_status_error(self):
        handler = Handler(debug=True)
        with pytest.raises(HttpError) as excinfo:
            await handler.send(Request(url=f"{BASE_URL}/status/404"))
        assert excinfo.value.status_code == 404

    @pytest.mark.asyncio
    async def test_no_content(self):
        handler = Handler(debug=True)
        assert await handler.send(Request(url=f"{BASE_URL}/status/204")) is None
