from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable
from typing import Any

import httpx


class CatalogServer:
    """Stand-in for a provider's ``/models`` endpoint."""

    def __init__(
        self,
        ids: Iterable[str] = (),
        *,
        status_code: int = 200,
        body: Any = None,
        delay: float = 0.0,
    ) -> None:
        self.ids = list(ids)
        self.status_code = status_code
        self.body = body
        self.delay = delay
        self.requests: list[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.body is not None:
            return httpx.Response(self.status_code, json=self.body)
        if self.status_code >= 400:
            return httpx.Response(self.status_code)
        return httpx.Response(200, json={"data": [{"id": i, "object": "model"} for i in self.ids]})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class RefusingTransport(httpx.AsyncBaseTransport):
    """Fails the test if any request is made."""

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request to {request.url}")


def body_of(descriptor) -> dict[str, Any]:
    return json.loads(descriptor.body)
