"""Narrow-then-wide search over the session metadata."""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from memory_bundle.core.config import Settings
from memory_bundle.core.logging import get_logger
from memory_bundle.core.metrics import SCORE_LATENCY
from memory_bundle.ingest.types import MetadataIndex
from memory_bundle.models.entities import SearchResult, SessionMetadata
from memory_bundle.retrieval.scorer import ScoreOutcome, SessionScorer
from memory_bundle.utils.time import utc_now


class CascadeState(str, enum.Enum):
    NARROW_ATTEMPT = "narrow_attempt"
    WIDE_ATTEMPT = "wide_attempt"
    HIT_NARROW = "hit_narrow"
    HIT_WIDE = "hit_wide"
    MISS_BOTH = "miss_both"
    HIT_SINGLE = "hit_single"
    MISS_SINGLE = "miss_single"


@dataclass(slots=True)
class CascadeOutcome:
    state: CascadeState
    result: SearchResult
    matched: list[SessionMetadata]
    layer: str | None
    estimated_cost: int
    fallback_required: bool = False
    trail: list[CascadeState] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.result.found and bool(self.matched)

    def to_dict(self) -> dict[str, object]:
        return {
            "state": self.state.value,
            "layer": self.layer,
            "estimated_cost": self.estimated_cost,
            "fallback_required": self.fallback_required,
            "trail": [step.value for step in self.trail],
        }


class CascadingSearch:
    """Runs the scorer against a recent partition first, then everything.

    With ``cascading`` disabled a single pass over the full partition is made.
    """

    def __init__(
        self,
        settings: Settings,
        scorer: SessionScorer | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or get_logger(__name__)
        self.scorer = scorer or SessionScorer(logger=self.logger)

    def search(
        self,
        keywords: Sequence[str],
        index: MetadataIndex,
        now: datetime | None = None,
        cascading: bool | None = None,
        threshold: float | None = None,
        max_results: int | None = None,
    ) -> CascadeOutcome:
        use_cascade = self.settings.cascading if cascading is None else cascading
        limit = threshold if threshold is not None else self.settings.threshold
        top_k = max_results if max_results is not None else self.settings.max_results

        if not use_cascade:
            outcome = self._attempt("single", keywords, index.sessions, limit, top_k)
            if _hit(outcome):
                return self._finish(CascadeState.HIT_SINGLE, outcome, "single", self.settings.wide_cost_estimate, [])
            return self._finish(
                CascadeState.MISS_SINGLE,
                outcome,
                None,
                self.settings.wide_cost_estimate,
                [],
                fallback=bool(keywords),
            )

        trail = [CascadeState.NARROW_ATTEMPT]
        narrow = index.narrow(self.settings.narrow_window_days, now or utc_now())
        outcome = self._attempt("narrow", keywords, narrow, limit, top_k)
        if _hit(outcome):
            return self._finish(CascadeState.HIT_NARROW, outcome, "narrow", self.settings.narrow_cost_estimate, trail)

        trail.append(CascadeState.WIDE_ATTEMPT)
        outcome = self._attempt("wide", keywords, index.sessions, limit, top_k)
        if _hit(outcome):
            return self._finish(CascadeState.HIT_WIDE, outcome, "wide", self.settings.wide_cost_estimate, trail)

        self.logger.info("No session matched in either layer; broader search required")
        return self._finish(
            CascadeState.MISS_BOTH,
            outcome,
            None,
            self.settings.narrow_cost_estimate + self.settings.wide_cost_estimate,
            trail,
            fallback=bool(keywords),
        )

    def _attempt(
        self,
        layer: str,
        keywords: Sequence[str],
        sessions: Sequence[SessionMetadata],
        threshold: float,
        max_results: int,
    ) -> ScoreOutcome:
        start = time.perf_counter()
        outcome = self.scorer.score(keywords, sessions, threshold=threshold, max_results=max_results)
        SCORE_LATENCY.labels(layer=layer).observe(time.perf_counter() - start)
        self.logger.debug(
            "%s layer searched %s sessions, found=%s",
            layer,
            len(sessions),
            outcome.result.found,
            extra={"ctx_layer": layer, "ctx_sessions": len(sessions)},
        )
        return outcome

    def _finish(
        self,
        state: CascadeState,
        outcome: ScoreOutcome,
        layer: str | None,
        cost: int,
        trail: list[CascadeState],
        fallback: bool = False,
    ) -> CascadeOutcome:
        return CascadeOutcome(
            state=state,
            result=outcome.result,
            matched=list(outcome.matched),
            layer=layer,
            estimated_cost=cost,
            fallback_required=fallback,
            trail=[*trail, state],
        )


def _hit(outcome: ScoreOutcome) -> bool:
    return outcome.result.found and bool(outcome.matched)


__all__ = ["CascadeState", "CascadeOutcome", "CascadingSearch"]
