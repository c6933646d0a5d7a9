"""Soft-fail loaders for the JSON memory files around the session index."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import orjson

from memory_bundle.core.config import Settings
from memory_bundle.core.logging import get_logger
from memory_bundle.ingest.types import LoadResult

_UNAVAILABLE: dict[str, Any] = {"available": False}


def read_json(path: Path, logger: logging.Logger | None = None) -> LoadResult[Any]:
    """Read and parse a JSON file, degrading to an unavailable result.

    A missing file is routine and logged at debug level; a file that exists
    but cannot be read or parsed is logged as a warning.
    """
    log = logger or get_logger(__name__)
    if not path.exists():
        log.debug("Memory file %s not found", path)
        return LoadResult(value=None, available=False, path=path, detail="missing")
    try:
        raw = path.read_bytes()
        data = orjson.loads(raw)
    except OSError as exc:
        log.warning("Failed to read %s: %s", path, exc, extra={"ctx_path": str(path)})
        return LoadResult(value=None, available=False, path=path, detail="unreadable")
    except orjson.JSONDecodeError as exc:
        log.warning("Failed to parse %s: %s", path, exc, extra={"ctx_path": str(path)})
        return LoadResult(value=None, available=False, path=path, detail="invalid_json")
    return LoadResult(value=data, available=True, path=path)


class MemoryFiles:
    """Loads the optional lessons, project brief and user profile files."""

    def __init__(self, settings: Settings, logger: logging.Logger | None = None) -> None:
        self.settings = settings
        self.logger = logger or get_logger(__name__)

    def lessons(self) -> LoadResult[list[Any]]:
        result = read_json(self.settings.lessons_path, self.logger)
        if result.available and not isinstance(result.value, list):
            self.logger.warning("Lessons file %s is not a JSON array", result.path)
            return LoadResult(value=[], available=False, path=result.path, detail="invalid_shape")
        return LoadResult(
            value=result.value if result.available else [],
            available=result.available,
            path=result.path,
            detail=result.detail,
        )

    def project_brief(self) -> LoadResult[dict[str, Any]]:
        return self._object(self.settings.project_brief_path)

    def user_profile(self) -> LoadResult[dict[str, Any]]:
        return self._object(self.settings.user_profile_path)

    def project_name(self, brief: LoadResult[dict[str, Any]] | None = None) -> str:
        """Name from the project brief, falling back to the root directory name."""
        brief = brief or self.project_brief()
        if brief.available:
            for key in ("project_name", "name"):
                value = brief.value.get(key)
                if isinstance(value, str) and value:
                    return value
        return self.settings.project_root.resolve().name

    def auxiliary_context(self) -> dict[str, Any]:
        """Everything a downstream reader needs besides the matched sessions."""
        lessons = self.lessons()
        brief = self.project_brief()
        profile = self.user_profile()
        return {
            "project_name": self.project_name(brief),
            "lessons": lessons.value,
            "lessons_available": lessons.available,
            "project_brief": brief.value,
            "user_profile": profile.value,
        }

    def _object(self, path: Path) -> LoadResult[dict[str, Any]]:
        result = read_json(path, self.logger)
        if not result.available:
            return LoadResult(value=dict(_UNAVAILABLE), available=False, path=path, detail=result.detail)
        if not isinstance(result.value, dict):
            self.logger.warning("Memory file %s is not a JSON object", path)
            return LoadResult(value=dict(_UNAVAILABLE), available=False, path=path, detail="invalid_shape")
        return LoadResult(value={"available": True, **result.value}, available=True, path=path)


__all__ = ["read_json", "MemoryFiles"]
