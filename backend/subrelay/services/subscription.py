from __future__ import annotations
import base64
import re

from subrelay.core.constants import DEFAULT_LABEL, DEFAULT_SUBSCRIPTION_NAME
from subrelay.services.rewriter import rewrite_line
from subrelay.services.vmess import PREFIX as VMESS_PREFIX

_LINE_SPLIT_RE = re.compile(r"\r?\n")


def _b64encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("utf-8")


def detect_newline(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def _needs_rewrite(line: str) -> bool:
    if not line.strip():
        return False
    return "#" in line or line.startswith(VMESS_PREFIX)


def render_subscription(
    raw: str,
    desired: str = DEFAULT_LABEL,
    subscription_name: str = DEFAULT_SUBSCRIPTION_NAME,
    limit: int = 0,
) -> str:
    """Relabel every connection line and return the joined plaintext list."""
    newline = detect_newline(raw)
    lines = _LINE_SPLIT_RE.split(raw)
    if limit > 0:
        lines = lines[:limit]

    out = [rewrite_line(ln, desired) if _needs_rewrite(ln) else ln for ln in lines]
    out.insert(0, f"# Subscription: {subscription_name}")
    return newline.join(out)


def process_subscription(
    raw: str,
    desired: str = DEFAULT_LABEL,
    subscription_name: str = DEFAULT_SUBSCRIPTION_NAME,
    limit: int = 0,
) -> str:
    return _b64encode(render_subscription(raw, desired, subscription_name, limit))
