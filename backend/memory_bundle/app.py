"""FastAPI application setup for the memory bundle loader."""

from __future__ import annotations

from fastapi import FastAPI, Response

from memory_bundle.api.routes_bundle import router as bundle_router
from memory_bundle.core.logging import configure_logging
from memory_bundle.core.metrics import metrics_response

configure_logging()

app = FastAPI(
    title="Memory Bundle",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.include_router(bundle_router, prefix="", tags=["bundle"])


@app.get("/health", tags=["admin"])
def health() -> dict[str, bool]:
    """Simple liveness check."""
    return {"ok": True}


@app.get("/metrics", tags=["admin"])
def metrics() -> Response:
    return metrics_response()
