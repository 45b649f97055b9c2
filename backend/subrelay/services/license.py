from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

import httpx
from pydantic import ValidationError

from subrelay.schemas.license import LicenseDocument, LicenseRecord

logger = logging.getLogger(__name__)


class LicenseStatus(str, Enum):
    valid = "valid"
    invalid = "invalid"
    check_failed = "check_failed"


@dataclass
class LicenseCheckResult:
    status: LicenseStatus
    detail: str
    license: Optional[LicenseRecord] = None

    @property
    def ok(self) -> bool:
        return self.status == LicenseStatus.valid


MSG_NOT_FOUND = "❌ License not found"
MSG_INACTIVE = "❌ License inactive"
MSG_EXPIRED = "❌ License expired"
MSG_USAGE_EXCEEDED = "❌ License usage limit exceeded"
MSG_CHECK_FAILED = "❌ License check failed"
MSG_VALID = "✅ License valid"


def _invalid(detail: str) -> LicenseCheckResult:
    return LicenseCheckResult(status=LicenseStatus.invalid, detail=detail)


def evaluate_license(
    document: LicenseDocument,
    key: Optional[str],
    client_ip: Optional[str],
    now: Optional[datetime] = None,
) -> LicenseCheckResult:
    """Apply the registry rules in order; the first failing rule wins."""
    now = now or datetime.now(timezone.utc)

    lic = document.find(key)
    if lic is None:
        return _invalid(MSG_NOT_FOUND)
    if lic.status != "active":
        return _invalid(MSG_INACTIVE)
    if lic.expire is not None and lic.expire < now:
        return _invalid(MSG_EXPIRED)
    if lic.limit_ip and client_ip not in lic.limit_ip:
        return _invalid(f"❌ IP not allowed ({client_ip})")
    if lic.max_usage and lic.used >= lic.max_usage:
        return _invalid(MSG_USAGE_EXCEEDED)

    return LicenseCheckResult(status=LicenseStatus.valid, detail=MSG_VALID, license=lic)


async def fetch_license_document(client: httpx.AsyncClient, source_url: str) -> LicenseDocument:
    r = await client.get(source_url)
    r.raise_for_status()
    return LicenseDocument.model_validate(r.json())


async def check_license(
    client: httpx.AsyncClient,
    source_url: str,
    key: Optional[str],
    client_ip: Optional[str],
    now: Optional[datetime] = None,
) -> LicenseCheckResult:
    try:
        document = await fetch_license_document(client, source_url)
    except (httpx.HTTPError, ValueError, ValidationError) as e:
        logger.warning("license registry unavailable url=%s err=%s", source_url, str(e)[:220])
        return LicenseCheckResult(status=LicenseStatus.check_failed, detail=MSG_CHECK_FAILED)
    return evaluate_license(document, key, client_ip, now)
