from __future__ import annotations
import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any

SCHEME = "vmess"
PREFIX = "vmess://"


@dataclass(frozen=True)
class DecodeOutcome:
    """Result of a best-effort decode.

    ``ok`` is False when decoding failed; ``value`` then carries the fallback
    (the original input, or None when there is nothing to fall back to).
    """
    ok: bool
    value: Any = None


def _b64decode_lenient(data: str) -> bytes:
    s = data.strip().replace("-", "+").replace("_", "/")
    s += "=" * (-len(s) % 4)
    return base64.b64decode(s.encode("ascii"), validate=False)


def decode_payload(data: str) -> DecodeOutcome:
    """Decode a standard or URL-safe base64 JSON object; never raises."""
    try:
        text = _b64decode_lenient(data).decode("utf-8")
        doc = json.loads(text)
    except (binascii.Error, UnicodeError, ValueError):
        return DecodeOutcome(ok=False)
    if not isinstance(doc, dict):
        return DecodeOutcome(ok=False)
    return DecodeOutcome(ok=True, value=doc)


def encode_payload(doc: dict[str, Any]) -> str:
    # Always emit padded standard base64, whatever dialect came in.
    text = json.dumps(doc, ensure_ascii=False, separators=(",", ":"))
    try:
        raw = text.encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates only survive as \u escapes.
        raw = json.dumps(doc, ensure_ascii=True, separators=(",", ":")).encode("ascii")
    return base64.b64encode(raw).decode("ascii")
