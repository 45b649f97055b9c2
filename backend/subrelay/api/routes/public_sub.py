from __future__ import annotations
import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import RedirectResponse

from subrelay.api.deps import get_client_ip, get_http_client
from subrelay.core.config import settings
from subrelay.services.client_detect import is_vpn_client
from subrelay.services.license import check_license
from subrelay.services.query_inputs import parse_limit, resolve_text
from subrelay.services.subscription import process_subscription
from subrelay.services.upstream import UpstreamError, fetch_subscription

logger = logging.getLogger(__name__)

UPSTREAM_FAILED_MSG = "خطا در دریافت/پردازش پاسخ مبدا"

router = APIRouter()

@router.get("/")
async def subscription(
    request: Request,
    license_key: Optional[str] = Query(None, alias="license"),
    nexzo: Optional[str] = None,
    sub: Optional[str] = None,
    limit: Optional[str] = None,
    client: httpx.AsyncClient = Depends(get_http_client),
    client_ip: Optional[str] = Depends(get_client_ip),
):
    if settings.CLIENT_DETECTION_ENABLED:
        ua = request.headers.get("user-agent")
        if not is_vpn_client(ua, request.headers):
            return RedirectResponse(url=settings.CLIENT_REDIRECT_URL, status_code=302)

    lic = await check_license(client, settings.LICENSE_SOURCE_URL, license_key, client_ip)
    if not lic.ok:
        logger.info("license rejected ip=%s status=%s detail=%s", client_ip, lic.status.value, lic.detail)
        return Response(content=lic.detail, status_code=403, media_type="text/plain")

    desired = resolve_text(nexzo, settings.DEFAULT_LABEL)
    sub_name = resolve_text(sub, settings.DEFAULT_SUBSCRIPTION_NAME)

    try:
        raw = await fetch_subscription(client, settings.UPSTREAM_URL)
        body = process_subscription(raw, desired, sub_name, parse_limit(limit))
    except UpstreamError as e:
        logger.warning("upstream fetch failed err=%s", str(e)[:220])
        return Response(content=UPSTREAM_FAILED_MSG, status_code=502, media_type="text/plain")
    except Exception:
        logger.exception("subscription processing failed")
        return Response(content=UPSTREAM_FAILED_MSG, status_code=502, media_type="text/plain")

    return Response(content=body, media_type="text/plain")
