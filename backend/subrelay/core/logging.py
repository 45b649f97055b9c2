from __future__ import annotations
import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install one stdout handler on the package logger (idempotent)."""
    root = logging.getLogger("subrelay")
    root.setLevel(level.upper())
    if any(getattr(h, "_subrelay", False) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._subrelay = True  # type: ignore[attr-defined]
    root.addHandler(handler)
