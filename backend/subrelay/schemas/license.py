from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


def _parse_datetime(v: Any) -> Any:
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        # Numeric registry dates are epoch milliseconds.
        return datetime.fromtimestamp(v / 1000, tz=timezone.utc)
    if isinstance(v, str):
        s = v.strip().replace("Z", "+00:00")
        # "2026/01/01" style dates are common in hand-edited registries.
        if len(s) >= 10 and s[4] == "/" and s[7] == "/":
            s = s[:10].replace("/", "-") + s[10:]
        return datetime.fromisoformat(s)
    return v


class LicenseRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str
    status: str = ""
    expire: Optional[datetime] = None
    limit_ip: list[str] = Field(default_factory=list)
    max_usage: Optional[int] = None
    used: int = 0

    @field_validator("status", mode="before")
    @classmethod
    def _none_as_blank(cls, v):
        return "" if v is None else v

    @field_validator("expire", mode="before")
    @classmethod
    def _parse_expire(cls, v):
        if v is None or v == "":
            return None
        return _parse_datetime(v)

    @field_validator("expire")
    @classmethod
    def _assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # Registry dates without an offset are read as UTC.
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("limit_ip", mode="before")
    @classmethod
    def _as_ip_list(cls, v):
        if not v:
            return []
        if isinstance(v, str):
            return [ip.strip() for ip in v.split(",") if ip.strip()]
        return v

    @field_validator("used", mode="before")
    @classmethod
    def _none_as_zero(cls, v):
        return v or 0


class LicenseDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    licenses: list[LicenseRecord] = Field(default_factory=list)

    @field_validator("licenses", mode="before")
    @classmethod
    def _drop_malformed(cls, v):
        """Skip broken records so one bad entry does not lock every key out."""
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("licenses must be a list")
        records: list[LicenseRecord] = []
        for i, item in enumerate(v):
            try:
                records.append(LicenseRecord.model_validate(item))
            except ValidationError as e:
                logger.warning("skipping malformed license record index=%s err=%s", i, str(e)[:220])
        return records

    def find(self, key: Optional[str]) -> Optional[LicenseRecord]:
        if not key:
            return None
        for lic in self.licenses:
            if lic.key == key:
                return lic
        return None
