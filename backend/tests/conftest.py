"""Test fixtures for the memory bundle loader."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset global singletons and environment between tests."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.setenv("MBL_PROJECT_ROOT", str(project))
    monkeypatch.setenv("MBL_CONFIG", str(tmp_path / "missing-config.yaml"))

    from memory_bundle.api import dependencies as deps
    from memory_bundle.core.config import get_settings

    get_settings.cache_clear()
    deps.get_app_settings.cache_clear()
    deps._BUNDLE_LOADER = None
    yield
    get_settings.cache_clear()
    deps.get_app_settings.cache_clear()
    deps._BUNDLE_LOADER = None


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    return tmp_path / "project"


@pytest.fixture
def memory_dir(project_root: Path) -> Path:
    path = project_root / ".claude" / "memory"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def settings(project_root: Path):
    from memory_bundle.core.config import Settings

    return Settings(project_root=project_root)


@pytest.fixture
def write_json() -> Callable[[Path, Any], Path]:
    def _write(path: Path, payload: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def session_entry() -> Callable[..., dict[str, Any]]:
    def _entry(session_id: str, **fields: Any) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "session_id": session_id,
            "date": "2026-10-17T10:00:00Z",
            "keywords": [],
            "key_topics": [],
            "summary_compact": "",
        }
        entry.update(fields)
        return entry

    return _entry
