"""Pydantic DTOs for the snapshot file and the API."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from memory_bundle.utils.time import utc_now


class Snapshot(BaseModel):
    """Cached bundle written once per loader invocation.

    Serialised with camelCase keys; reusable by another process until
    ``created_at + ttl_seconds``.
    """

    created_at: datetime
    ttl_seconds: int = Field(ge=0)
    mode: Literal["selective", "legacy"]
    index_available: bool
    keywords_extracted: list[str]
    matched_sessions: list[dict[str, Any]]
    matched_count: int
    search_result: dict[str, Any]
    layer: str | None = None
    cascade: dict[str, Any] | None = None
    auxiliary_context: dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def expires_at(self) -> datetime:
        return self.created_at + timedelta(seconds=self.ttl_seconds)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utc_now()) >= self.expires_at


class BundleRequest(BaseModel):
    query: str
    threshold: float | None = Field(default=None, ge=0.0, le=1.0)
    max_results: int | None = Field(default=None, ge=1, le=50)
    cascading: bool | None = None


class SnapshotResponse(BaseModel):
    expired: bool
    snapshot: Snapshot


__all__ = ["Snapshot", "BundleRequest", "SnapshotResponse"]
