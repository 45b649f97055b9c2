from typing import AsyncIterator, Optional

import httpx
from fastapi import Request

from subrelay.services.http_client import build_async_client
from subrelay.services.query_inputs import client_ip_from


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with build_async_client() as client:
        yield client


def get_client_ip(request: Request) -> Optional[str]:
    peer = request.client.host if request.client else None
    return client_ip_from(request.headers.get("x-forwarded-for"), peer)
