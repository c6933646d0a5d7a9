"""Deduplication helpers."""

from __future__ import annotations

from typing import Any, Iterable, Mapping


def session_key(record: Mapping[str, Any]) -> str | None:
    """Return the identifier of a raw session record, if it has one."""
    value = record.get("session_id", record.get("id"))
    if value is None or value == "":
        return None
    return str(value)


def dedupe_sessions(records: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Remove records sharing a session id while preserving first occurrence order.

    Records without an id are passed through untouched; the caller decides
    what to do with them.
    """
    seen: set[str] = set()
    unique: list[Mapping[str, Any]] = []
    for record in records:
        key = session_key(record)
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        unique.append(record)
    return unique


__all__ = ["session_key", "dedupe_sessions"]
