from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote, unquote

from subrelay.services.flags import DEFAULT_LABEL, build_label
from subrelay.services.vmess import PREFIX as VMESS_PREFIX, SCHEME as VMESS_SCHEME
from subrelay.services.vmess import DecodeOutcome, decode_payload, encode_payload

_SCHEME_RE = re.compile(r"^\s*([a-zA-Z][a-zA-Z0-9+.-]*)://")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")

# Left unescaped on top of alphanumerics and "-_.~".
_FRAGMENT_SAFE = "!~*'()"


@dataclass
class ConnectionLine:
    raw: str
    hash_pos: int
    body: str
    raw_suffix: str

    @property
    def has_fragment(self) -> bool:
        return self.hash_pos >= 0


def split_line(line: str) -> ConnectionLine:
    pos = line.find("#")
    if pos < 0:
        return ConnectionLine(raw=line, hash_pos=pos, body=line, raw_suffix="")
    return ConnectionLine(raw=line, hash_pos=pos, body=line[:pos], raw_suffix=line[pos + 1:])


def decode_fragment(raw: str) -> DecodeOutcome:
    """Percent-decode a fragment; on malformed input fall back to ``raw``."""
    s = raw.replace("+", "%20")
    if _BAD_ESCAPE_RE.search(s):
        return DecodeOutcome(ok=False, value=raw)
    try:
        return DecodeOutcome(ok=True, value=unquote(s, encoding="utf-8", errors="strict"))
    except UnicodeDecodeError:
        return DecodeOutcome(ok=False, value=raw)


def encode_fragment(text: str) -> str:
    return quote(text, safe=_FRAGMENT_SAFE)


def parse_scheme(body: str) -> Optional[str]:
    m = _SCHEME_RE.match(body)
    return m.group(1).lower() if m else None


def _name_source(ps: Any, tag: str) -> str:
    """Text to take flags from: the payload name when it counts as set, else the fragment."""
    if isinstance(ps, str):
        return ps or tag
    if isinstance(ps, dict):
        # Objects always count as set and never carry flags.
        return ""
    if isinstance(ps, list):
        return ",".join("" if x is None else str(x) for x in ps) or tag
    if ps is None or ps is False or ps == 0:
        return tag
    return str(ps)


def rewrite_line(line: str, desired: str = DEFAULT_LABEL) -> str:
    """Replace the display name of one connection URI, keeping its flags.

    Lines that are not URIs come back untouched. For vmess the name inside the
    base64 JSON body is rewritten as well; when the line already carries a
    ``#`` fragment the fragment keeps its own independently built label.
    """
    if not line or "://" not in line:
        return line

    parts = split_line(line)
    tag = decode_fragment(parts.raw_suffix).value
    scheme = parse_scheme(parts.body)

    body = parts.body
    final_label = build_label(tag, desired)

    if scheme == VMESS_SCHEME:
        decoded = decode_payload(parts.body[len(VMESS_PREFIX):])
        if decoded.ok:
            doc = decoded.value
            ps = doc.get("ps")
            flag_source = _name_source(ps, tag)
            doc["ps"] = build_label(flag_source, desired)
            body = VMESS_PREFIX + encode_payload(doc)
            if not parts.has_fragment:
                final_label = doc["ps"]

    return body + "#" + encode_fragment(final_label)
