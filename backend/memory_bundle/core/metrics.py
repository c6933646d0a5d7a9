"""Prometheus metrics instrumentation."""

from __future__ import annotations

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

BUNDLE_LOADS = Counter(
    "mbl_bundle_loads_total",
    "Bundle loads by index mode and satisfying search layer",
    labelnames=("mode", "layer"),
    registry=REGISTRY,
)

SCORE_LATENCY = Histogram(
    "mbl_score_latency_seconds",
    "Latency of a single scoring pass",
    labelnames=("layer",),
    registry=REGISTRY,
)

DEGRADED_RECORDS = Counter(
    "mbl_degraded_records_total",
    "Session records replaced by their metadata stand-in",
    labelnames=("reason",),
    registry=REGISTRY,
)

SNAPSHOT_WRITES = Counter(
    "mbl_snapshot_writes_total",
    "Snapshot files written",
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "BUNDLE_LOADS",
    "SCORE_LATENCY",
    "DEGRADED_RECORDS",
    "SNAPSHOT_WRITES",
    "metrics_response",
]
