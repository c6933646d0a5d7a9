"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "MBL_"
DEFAULT_CONFIG_PATH = Path("~/.config/memory-bundle/config.yaml")

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("project", "root"): "project_root",
    ("memory", "dir"): "memory_dir",
    ("memory", "index_file"): "index_file",
    ("memory", "sessions_dir"): "sessions_dir",
    ("memory", "lessons_file"): "lessons_file",
    ("memory", "project_brief_file"): "project_brief_file",
    ("memory", "user_profile_file"): "user_profile_file",
    ("search", "threshold"): "threshold",
    ("search", "max_results"): "max_results",
    ("search", "cascading"): "cascading",
    ("search", "narrow_window_days"): "narrow_window_days",
    ("search", "narrow_cost_estimate"): "narrow_cost_estimate",
    ("search", "wide_cost_estimate"): "wide_cost_estimate",
    ("snapshot", "file"): "snapshot_file",
    ("snapshot", "ttl_seconds"): "ttl_seconds",
    ("personality", "confidence_threshold"): "mbti_confidence_threshold",
}


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    project_root: Path = Field(default_factory=Path.cwd)
    memory_dir: Path = Path(".claude/memory")
    index_file: str = ".memory-index.json"
    sessions_dir: str = "sessions"
    lessons_file: str = "lessons-learned.json"
    project_brief_file: str = "project-brief.json"
    user_profile_file: str = "user-profile.json"
    snapshot_file: str = ".memory-bundle.json"
    threshold: float = Field(default=0.65, ge=0.0, le=1.0)
    max_results: int = Field(default=5, ge=1)
    cascading: bool = True
    narrow_window_days: int = Field(default=7, ge=0)
    narrow_cost_estimate: int = 500
    wide_cost_estimate: int = 2000
    ttl_seconds: int = Field(default=300, ge=0)
    summary_max_chars: int = 200
    mbti_confidence_threshold: float = Field(default=0.6, ge=0.0, le=1.0)

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
    }

    @field_validator("project_root", "memory_dir", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        if isinstance(value, Path):
            return value.expanduser()
        if isinstance(value, str):
            return Path(value).expanduser()
        raise TypeError("path settings must be a path or string")

    @property
    def memory_path(self) -> Path:
        if self.memory_dir.is_absolute():
            return self.memory_dir
        return self.project_root / self.memory_dir

    @property
    def index_path(self) -> Path:
        return self.memory_path / self.index_file

    @property
    def sessions_path(self) -> Path:
        return self.memory_path / self.sessions_dir

    @property
    def snapshot_path(self) -> Path:
        return self.memory_path / self.snapshot_file

    @property
    def lessons_path(self) -> Path:
        return self.memory_path / self.lessons_file

    @property
    def project_brief_path(self) -> Path:
        return self.memory_path / self.project_brief_file

    @property
    def user_profile_path(self) -> Path:
        return self.memory_path / self.user_profile_file

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "Settings":
        """Load YAML config and overlay env vars; fall back to defaults."""
        config_path = cls._resolve_config_path(path)
        data: dict[str, Any] = {}
        if config_path and config_path.exists():
            with config_path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
            data.update(_flatten_yaml(raw))
        data.update(_load_env_overrides())
        return cls(**data)

    @staticmethod
    def _resolve_config_path(path: Path | None) -> Path | None:
        if path is not None:
            return path.expanduser()
        env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        resolved_default = DEFAULT_CONFIG_PATH.expanduser()
        return resolved_default if resolved_default.exists() else None


def _flatten_yaml(raw: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> dict[str, Any]:
    """Flatten nested YAML configuration to Settings field names."""
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        next_prefix = prefix + (key,)
        if isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        else:
            mapped_key = _YAML_KEY_MAP.get(next_prefix)
            if mapped_key:
                flat[mapped_key] = value
            elif key in Settings.model_fields:
                flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with MBL_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            overrides[field_name] = value
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor for dependency injection."""
    return Settings.from_yaml()


__all__ = ["Settings", "get_settings"]
