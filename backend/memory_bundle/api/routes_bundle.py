"""Bundle API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from memory_bundle.api.dependencies import get_app_settings, get_bundle_loader
from memory_bundle.bundle.loader import BundleLoader
from memory_bundle.bundle.snapshot import read_snapshot
from memory_bundle.core.config import Settings
from memory_bundle.models.dto import BundleRequest, SnapshotResponse

router = APIRouter()


@router.post("/bundle", response_model=SnapshotResponse, summary="Build and cache a memory bundle")
def build_bundle(
    request: BundleRequest,
    loader: BundleLoader = Depends(get_bundle_loader),
) -> SnapshotResponse:
    snapshot = loader.load(
        request.query,
        cascading=request.cascading,
        threshold=request.threshold,
        max_results=request.max_results,
    )
    return SnapshotResponse(expired=snapshot.is_expired(), snapshot=snapshot)


@router.get("/bundle", response_model=SnapshotResponse, summary="Return the cached memory bundle")
def current_bundle(settings: Settings = Depends(get_app_settings)) -> SnapshotResponse:
    snapshot = read_snapshot(settings.snapshot_path)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No snapshot written yet")
    return SnapshotResponse(expired=snapshot.is_expired(), snapshot=snapshot)
