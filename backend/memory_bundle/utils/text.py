"""Text processing helpers."""

from __future__ import annotations

import re
from typing import Any

_STRIP_RE = re.compile(r"[^\w\s-]")

MIN_TOKEN_LENGTH = 3


def tokenize(query: Any) -> list[str]:
    """Turn a free-text query into lowercase keywords.

    Punctuation other than hyphens becomes a separator and tokens of two
    characters or fewer are dropped. Anything that is not a non-empty string
    yields an empty list, which callers treat as "no keywords".
    """
    if not isinstance(query, str) or not query:
        return []
    cleaned = _STRIP_RE.sub(" ", query.lower())
    return [token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH]


def truncate(text: str, limit: int) -> str:
    """Return at most ``limit`` characters of ``text``."""
    if len(text) <= limit:
        return text
    return text[:limit]


__all__ = ["tokenize", "truncate"]
