from __future__ import annotations
import re
from typing import Optional

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

def parse_limit(raw: Optional[str]) -> int:
    """Read ``limit`` the lenient way: leading digits only, anything else is 0."""
    if raw is None:
        return 0
    m = _LEADING_INT_RE.match(str(raw))
    if not m:
        return 0
    return max(0, int(m.group(1)))

def resolve_text(raw: Optional[str], default: str) -> str:
    # Empty query values fall back to the default, like missing ones.
    if raw is None or raw == "":
        return default
    return str(raw)

def client_ip_from(forwarded_for: Optional[str], peer: Optional[str]) -> Optional[str]:
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return peer
