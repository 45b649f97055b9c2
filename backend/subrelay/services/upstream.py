from __future__ import annotations
import httpx


class UpstreamError(Exception):
    """Upstream subscription source could not be read (network or HTTP status)."""


async def fetch_subscription(client: httpx.AsyncClient, url: str) -> str:
    try:
        r = await client.get(url)
    except httpx.RequestError as e:
        raise UpstreamError(f"GET {url} failed: {e}") from e
    if not r.is_success:
        raise UpstreamError(f"HTTP {r.status_code} GET {url}: {r.text[:300]}")
    return r.text
