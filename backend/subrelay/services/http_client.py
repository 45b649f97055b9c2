from __future__ import annotations
import httpx
from subrelay.core.config import settings

def build_async_client(**kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.HTTP_TIMEOUT_SECONDS),
        verify=settings.UPSTREAM_TLS_VERIFY,
        headers={"User-Agent": f"{settings.APP_NAME}/1.0"},
        follow_redirects=True,
        **kwargs,
    )
