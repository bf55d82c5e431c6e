"""Header text normalization shared by the resolver, formatter and styler."""

from __future__ import annotations

import re

from statline.models.table import SORT_GLYPHS

_GLYPHS_RE = re.compile(f"[{SORT_GLYPHS}]")
_WORD_START_RE = re.compile(r"(?:^\w|[A-Z]|\b\w)", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")
_NON_LOWER_ALNUM_RE = re.compile(r"[^a-z0-9]")


def clean_header(header: str) -> str:
    """Drop sort-indicator glyphs and surrounding whitespace."""
    return _GLYPHS_RE.sub("", header).strip()


def normalize_header(header: str) -> str:
    return clean_header(header).lower()


def to_camel_case(text: str) -> str:
    """``"avg rating"`` -> ``"avgRating"``; punctuation is dropped."""
    camel = _WORD_START_RE.sub(
        lambda m: m.group().lower() if m.start() == 0 else m.group().upper(),
        text,
    )
    return _NON_ALNUM_RE.sub("", _WHITESPACE_RE.sub("", camel))


def alnum_key(text: str) -> str:
    return _NON_LOWER_ALNUM_RE.sub("", text.lower())


__all__ = ["alnum_key", "clean_header", "normalize_header", "to_camel_case"]
