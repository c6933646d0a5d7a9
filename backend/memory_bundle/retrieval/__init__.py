"""Retrieval orchestration components."""

from .scorer import SessionScorer, ScoreOutcome, score_session, rank_sessions
from .cascade import CascadeOutcome, CascadeState, CascadingSearch
from .records import FullRecordLoader

__all__ = [
    "SessionScorer",
    "ScoreOutcome",
    "score_session",
    "rank_sessions",
    "CascadeOutcome",
    "CascadeState",
    "CascadingSearch",
    "FullRecordLoader",
]
