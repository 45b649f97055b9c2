from __future__ import annotations
import re
from typing import Optional

from subrelay.core.constants import DEFAULT_LABEL

# A country flag is a pair of Regional Indicator Symbols.
FLAG_RE = re.compile(r"[\U0001F1E6-\U0001F1FF]{2}")


def extract_flags(text: Optional[str]) -> list[str]:
    return FLAG_RE.findall(text or "")


def build_label(source_text: Optional[str], desired: str = DEFAULT_LABEL) -> str:
    """Keep the flags found in ``source_text`` in front of ``desired``.

    >>> build_label("🇺🇸 🇩🇪 old name", "new")
    '🇺🇸 🇩🇪 new'
    """
    flags = extract_flags(source_text)
    prefix = " ".join(flags) + " " if flags else ""
    return (prefix + desired).strip()
