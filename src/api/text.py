# src/api/text.py
from __future__ import annotations

import re

_WS_RX = re.compile(r"\s+")


def norm_theme(s: str) -> str:
    """
    Canonical registry key for a theme identifier.
    - lowercases
    - trims
    - collapses inner whitespace to a single "-"
    """
    t = (s or "").strip().lower()
    return _WS_RX.sub("-", t)


def norm_code(s: str, *, upper: bool = False) -> str:
    """Language codes are lowercase ("en", "pt-br"), currency codes uppercase ("USD")."""
    t = (s or "").strip().replace("_", "-")
    return t.upper() if upper else t.lower()
