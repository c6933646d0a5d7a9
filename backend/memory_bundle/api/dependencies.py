"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from memory_bundle.bundle.loader import BundleLoader
from memory_bundle.core.config import Settings, get_settings
from memory_bundle.core.logging import get_logger

_BUNDLE_LOADER: BundleLoader | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_bundle_loader() -> BundleLoader:
    global _BUNDLE_LOADER
    if _BUNDLE_LOADER is None:
        _BUNDLE_LOADER = BundleLoader(get_app_settings(), logger=get_logger("memory_bundle.api"))
    return _BUNDLE_LOADER


__all__ = ["get_app_settings", "get_bundle_loader"]
