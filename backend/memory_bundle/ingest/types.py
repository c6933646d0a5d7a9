"""Common ingestion data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Generic, Literal, TypeVar, Union

from memory_bundle.models.entities import SessionMetadata

T = TypeVar("T")

IndexMode = Literal["selective", "legacy"]


@dataclass(frozen=True)
class LoadResult(Generic[T]):
    """Value returned by loaders that degrade instead of raising."""

    value: T
    available: bool
    path: Path | None = None
    detail: str | None = None


@dataclass(slots=True)
class LegacyIndex:
    """Single flat ``{"sessions": [...]}`` index."""

    sessions: list[dict[str, Any]]

    mode: IndexMode = field(default="legacy", init=False)

    def raw_sessions(self) -> list[dict[str, Any]]:
        return list(self.sessions)


@dataclass(slots=True)
class DualIndex:
    """``recent`` and ``important`` partitions which may overlap."""

    recent: list[dict[str, Any]]
    important: list[dict[str, Any]]

    mode: IndexMode = field(default="selective", init=False)

    def raw_sessions(self) -> list[dict[str, Any]]:
        return [*self.recent, *self.important]


IndexFormat = Union[LegacyIndex, DualIndex]


@dataclass(slots=True)
class MetadataIndex:
    """Deduplicated session metadata plus the format it came from."""

    sessions: list[SessionMetadata]
    mode: IndexMode

    def narrow(self, window_days: int, now: datetime) -> list[SessionMetadata]:
        """Sessions dated within ``window_days`` of ``now``; undated ones are left out."""
        cutoff = now - timedelta(days=window_days)
        partition: list[SessionMetadata] = []
        for session in self.sessions:
            stamp = session.timestamp
            if stamp is not None and stamp >= cutoff:
                partition.append(session)
        return partition


__all__ = [
    "LoadResult",
    "LegacyIndex",
    "DualIndex",
    "IndexFormat",
    "IndexMode",
    "MetadataIndex",
]
