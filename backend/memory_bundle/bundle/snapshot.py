"""Snapshot persistence for the selective memory bundle."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

import orjson
from pydantic import ValidationError

from memory_bundle.core.logging import get_logger
from memory_bundle.core.metrics import SNAPSHOT_WRITES
from memory_bundle.ingest.types import IndexMode
from memory_bundle.models.dto import Snapshot
from memory_bundle.models.entities import FullSessionRecord, SearchResult
from memory_bundle.utils.time import utc_now


class SnapshotWriter:
    """Writes the bundle snapshot, replacing whatever was there before."""

    def __init__(self, path: Path, logger: logging.Logger | None = None) -> None:
        self.path = path
        self.logger = logger or get_logger(__name__)

    def build(
        self,
        records: Sequence[FullSessionRecord],
        keywords: Sequence[str],
        auxiliary: dict[str, Any],
        ttl_seconds: int,
        mode: IndexMode,
        search_result: SearchResult,
        index_available: bool = True,
        layer: str | None = None,
        cascade: dict[str, Any] | None = None,
    ) -> Snapshot:
        return Snapshot(
            created_at=utc_now(),
            ttl_seconds=ttl_seconds,
            mode=mode,
            index_available=index_available,
            keywords_extracted=list(keywords),
            matched_sessions=[record.to_dict() for record in records],
            matched_count=len(records),
            search_result=search_result.to_dict(),
            layer=layer,
            cascade=cascade,
            auxiliary_context=auxiliary,
        )

    def write_snapshot(
        self,
        records: Sequence[FullSessionRecord],
        keywords: Sequence[str],
        auxiliary: dict[str, Any],
        ttl_seconds: int,
        **fields: Any,
    ) -> Snapshot:
        return self.write(self.build(records, keywords, auxiliary, ttl_seconds, **fields))

    def write(self, snapshot: Snapshot) -> Snapshot:
        """Serialise ``snapshot`` to disk; I/O errors propagate to the caller."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = snapshot.model_dump(mode="json", by_alias=True)
        self.path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
        SNAPSHOT_WRITES.inc()
        self.logger.info(
            "Wrote snapshot with %s sessions to %s",
            snapshot.matched_count,
            self.path,
            extra={"ctx_mode": snapshot.mode, "ctx_matched": snapshot.matched_count},
        )
        return snapshot


def read_snapshot(path: Path, logger: logging.Logger | None = None) -> Snapshot | None:
    """Load a previously written snapshot, or ``None`` if absent or unusable."""
    log = logger or get_logger(__name__)
    if not path.exists():
        return None
    try:
        return Snapshot.model_validate(orjson.loads(path.read_bytes()))
    except (OSError, orjson.JSONDecodeError, ValidationError) as exc:
        log.warning("Ignoring unreadable snapshot %s: %s", path, exc)
        return None


__all__ = ["SnapshotWriter", "read_snapshot"]
