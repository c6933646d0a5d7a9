"""Internal dataclasses representing sessions and search outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from memory_bundle.utils.time import parse_iso


@dataclass(slots=True)
class SessionMetadata:
    """Searchable surface of one persisted session."""

    id: str
    date: str | None
    keywords: list[str]
    topics: list[str]
    summary_compact: str
    importance_rank: int
    location: str | None = None

    @property
    def timestamp(self) -> datetime | None:
        return parse_iso(self.date)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.id,
            "date": self.date,
            "keywords": list(self.keywords),
            "key_topics": list(self.topics),
            "summary_compact": self.summary_compact,
            "importance_rank": self.importance_rank,
            "file_path": self.location,
        }


@dataclass(slots=True)
class ScoredSession:
    metadata: SessionMetadata
    raw_score: int
    max_possible_score: int
    percent_score: float
    matched_keywords: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class TopMatch:
    id: str
    percent_score: float
    matched_keywords: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class MissReason:
    message: str
    threshold: float | None = None
    sessions_searched: int = 0


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Outcome of one scoring pass."""

    found: bool
    query: tuple[str, ...]
    matched_count: int
    top_match: TopMatch | None = None
    reason: MissReason | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "found": self.found,
            "query": list(self.query),
            "matched_count": self.matched_count,
        }
        if self.top_match is not None:
            payload["top_match"] = {
                "id": self.top_match.id,
                "percent_score": self.top_match.percent_score,
                "matched_keywords": list(self.top_match.matched_keywords),
            }
        if self.reason is not None:
            payload["reason"] = {
                "message": self.reason.message,
                "threshold": self.reason.threshold,
                "sessions_searched": self.reason.sessions_searched,
            }
        return payload


@dataclass(slots=True)
class FullSessionRecord:
    """A session resolved from disk, or its metadata stand-in."""

    session_id: str
    payload: dict[str, Any]
    degraded: bool = False
    detail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if not self.degraded:
            return dict(self.payload)
        return {**self.payload, "degraded": True, "degraded_reason": self.detail}


__all__ = [
    "SessionMetadata",
    "ScoredSession",
    "TopMatch",
    "MissReason",
    "SearchResult",
    "FullSessionRecord",
]
