"""Guess whether a request comes from a VPN client app or from a browser.

This is a heuristic over attacker-controlled strings. It only decides where to
send casual visitors; anybody can bypass it by sending a different User-Agent.
"""
from __future__ import annotations
import re
from typing import Mapping, Optional

CLIENT_TOKENS = (
    "v2rayng",
    "v2rayn",
    "v2rayu",
    "v2box",
    "nekobox",
    "nekoray",
    "hiddify",
    "streisand",
    "shadowrocket",
    "foxray",
    "clash",
    "stash",
    "mihomo",
    "sing-box",
    "singbox",
    "sfa",
    "sfi",
    "karing",
    "happ",
    "quantumult",
    "surge",
    "loon",
)

BROWSER_HEADERS = ("sec-fetch-mode", "sec-fetch-dest", "sec-ch-ua", "upgrade-insecure-requests")

_BROWSER_RE = re.compile(r"Mozilla/\d.*\b(Chrome|Firefox|Safari|Edg|OPR|Opera)/", re.IGNORECASE)
_PROGRAMMATIC_RE = re.compile(
    r"^(okhttp|Go-http-client|Dart|curl|Wget|python-requests|python-httpx|axios|node-fetch|Java|CFNetwork)\b",
    re.IGNORECASE,
)

SHORT_UA_LENGTH = 12


def _has_token(ua_lower: str, token: str) -> bool:
    # Short tokens must be whole words; "sfa" also appears inside "safari".
    if len(token) <= 4:
        return re.search(rf"(?<![a-z]){re.escape(token)}(?![a-z])", ua_lower) is not None
    return token in ua_lower


def is_vpn_client(user_agent: Optional[str], headers: Optional[Mapping[str, str]] = None) -> bool:
    ua = (user_agent or "").strip()
    ua_lower = ua.lower()

    if any(_has_token(ua_lower, t) for t in CLIENT_TOKENS):
        return True

    present = {k.lower() for k in (headers or {}).keys()}
    if any(h in present for h in BROWSER_HEADERS):
        return False

    if _BROWSER_RE.search(ua):
        return False
    if _PROGRAMMATIC_RE.search(ua):
        return True

    return len(ua) < SHORT_UA_LENGTH
