"""Tests for the narrow-then-wide search controller."""

from datetime import datetime, timezone

from memory_bundle.core.config import Settings
from memory_bundle.ingest.types import MetadataIndex
from memory_bundle.models.entities import SessionMetadata
from memory_bundle.retrieval.cascade import CascadeState, CascadingSearch

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _session(session_id: str, date: str, keywords=(), rank: int = 1) -> SessionMetadata:
    return SessionMetadata(
        id=session_id,
        date=date,
        keywords=list(keywords),
        topics=[],
        summary_compact="",
        importance_rank=rank,
    )


def _index() -> MetadataIndex:
    return MetadataIndex(
        sessions=[
            _session("recent-auth", "2026-10-17T08:00:00Z", keywords=["auth"], rank=1),
            _session("old-billing", "2026-06-01T08:00:00Z", keywords=["billing", "invoice"], rank=2),
        ],
        mode="selective",
    )


def test_narrow_hit(settings: Settings) -> None:
    outcome = CascadingSearch(settings).search(["auth"], _index(), now=NOW)

    assert outcome.state is CascadeState.HIT_NARROW
    assert outcome.layer == "narrow"
    assert [session.id for session in outcome.matched] == ["recent-auth"]
    assert outcome.estimated_cost == settings.narrow_cost_estimate
    assert outcome.trail == [CascadeState.NARROW_ATTEMPT, CascadeState.HIT_NARROW]


def test_falls_back_to_wide_layer(settings: Settings) -> None:
    outcome = CascadingSearch(settings).search(["billing", "invoice"], _index(), now=NOW)

    assert outcome.state is CascadeState.HIT_WIDE
    assert outcome.layer == "wide"
    assert [session.id for session in outcome.matched] == ["old-billing"]
    assert outcome.estimated_cost > settings.narrow_cost_estimate
    assert outcome.trail == [CascadeState.NARROW_ATTEMPT, CascadeState.WIDE_ATTEMPT, CascadeState.HIT_WIDE]


def test_miss_both_requires_fallback(settings: Settings) -> None:
    outcome = CascadingSearch(settings).search(["kubernetes"], _index(), now=NOW)

    assert outcome.state is CascadeState.MISS_BOTH
    assert outcome.layer is None
    assert outcome.fallback_required is True
    assert outcome.matched == []
    assert outcome.result.found is False


def test_single_pass_mode(settings: Settings) -> None:
    settings.cascading = False
    outcome = CascadingSearch(settings).search(["billing"], _index(), now=NOW)

    assert outcome.state is CascadeState.HIT_SINGLE
    assert outcome.layer == "single"
    assert outcome.trail == [CascadeState.HIT_SINGLE]


def test_per_call_override_and_threshold(settings: Settings) -> None:
    search = CascadingSearch(settings)
    outcome = search.search(["billing", "unknown"], _index(), now=NOW, cascading=False, threshold=0.5)
    assert outcome.state is CascadeState.HIT_SINGLE

    strict = search.search(["billing", "unknown"], _index(), now=NOW, cascading=False)
    assert strict.state is CascadeState.MISS_SINGLE
    assert strict.fallback_required is True


def test_empty_query_needs_no_fallback(settings: Settings) -> None:
    outcome = CascadingSearch(settings).search([], _index(), now=NOW)

    assert outcome.state is CascadeState.MISS_BOTH
    assert outcome.fallback_required is False
    assert outcome.to_dict()["state"] == "miss_both"


def test_explicit_zero_max_results_is_respected(settings: Settings) -> None:
    outcome = CascadingSearch(settings).search(["auth"], _index(), now=NOW, max_results=0)

    assert outcome.matched == []
    assert outcome.state is CascadeState.MISS_BOTH
