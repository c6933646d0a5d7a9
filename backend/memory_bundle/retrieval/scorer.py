"""Weighted keyword scoring of session metadata."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from memory_bundle.core.logging import get_logger
from memory_bundle.models.entities import MissReason, ScoredSession, SearchResult, SessionMetadata, TopMatch

KEYWORD_WEIGHT = 3
TOPIC_WEIGHT = 2
SUMMARY_WEIGHT = 1

NO_KEYWORDS = "no keywords"
BELOW_THRESHOLD = "no session reached the threshold"


@dataclass(slots=True)
class ScoreOutcome:
    result: SearchResult
    matched: list[SessionMetadata] = field(default_factory=list)
    scored: list[ScoredSession] = field(default_factory=list)


def _tag_hit(tags: Sequence[str], keyword: str) -> bool:
    for tag in tags:
        lowered = tag.lower()
        if lowered and (lowered in keyword or keyword in lowered):
            return True
    return False


def score_session(keywords: Sequence[str], session: SessionMetadata) -> ScoredSession:
    """Score one session against an already tokenized keyword list."""
    raw_score = 0
    matched: list[str] = []
    summary = session.summary_compact.lower()
    for keyword in keywords:
        needle = keyword.lower()
        hit = False
        if _tag_hit(session.keywords, needle):
            raw_score += KEYWORD_WEIGHT
            hit = True
        if _tag_hit(session.topics, needle):
            raw_score += TOPIC_WEIGHT
            hit = True
        if needle and needle in summary:
            raw_score += SUMMARY_WEIGHT
            hit = True
        if hit and keyword not in matched:
            matched.append(keyword)
    max_possible = len(keywords) * KEYWORD_WEIGHT
    percent = raw_score / max_possible if max_possible else 0.0
    return ScoredSession(
        metadata=session,
        raw_score=raw_score,
        max_possible_score=max_possible,
        percent_score=percent,
        matched_keywords=matched,
    )


def rank_sessions(keywords: Sequence[str], sessions: Sequence[SessionMetadata]) -> list[ScoredSession]:
    """Score every session; highest raw score first, lower importance rank breaks ties."""
    scored = [score_session(keywords, session) for session in sessions]
    scored.sort(key=lambda item: (-item.raw_score, item.metadata.importance_rank))
    return scored


class SessionScorer:
    """Filters scored sessions by threshold and summarises the pass."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger(__name__)

    def score(
        self,
        keywords: Sequence[str],
        sessions: Sequence[SessionMetadata],
        threshold: float,
        max_results: int,
    ) -> ScoreOutcome:
        query = tuple(keywords)
        if not keywords:
            return ScoreOutcome(
                result=SearchResult(
                    found=False,
                    query=query,
                    matched_count=0,
                    reason=MissReason(message=NO_KEYWORDS, threshold=threshold, sessions_searched=len(sessions)),
                )
            )

        scored = rank_sessions(keywords, sessions)
        passing = [item for item in scored if item.percent_score >= threshold][: max(max_results, 0)]
        self.logger.debug(
            "Scored %s sessions, %s passed threshold %.2f",
            len(scored),
            len(passing),
            threshold,
        )
        if not passing:
            return ScoreOutcome(
                result=SearchResult(
                    found=False,
                    query=query,
                    matched_count=0,
                    reason=MissReason(message=BELOW_THRESHOLD, threshold=threshold, sessions_searched=len(sessions)),
                ),
                scored=scored,
            )

        top = passing[0]
        return ScoreOutcome(
            result=SearchResult(
                found=True,
                query=query,
                matched_count=len(passing),
                top_match=TopMatch(
                    id=top.metadata.id,
                    percent_score=top.percent_score,
                    matched_keywords=tuple(top.matched_keywords),
                ),
            ),
            matched=[item.metadata for item in passing],
            scored=scored,
        )


__all__ = [
    "KEYWORD_WEIGHT",
    "TOPIC_WEIGHT",
    "SUMMARY_WEIGHT",
    "NO_KEYWORDS",
    "ScoreOutcome",
    "SessionScorer",
    "score_session",
    "rank_sessions",
]
