"""Resolve matched metadata to full session records on disk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import orjson

from memory_bundle.core.logging import get_logger
from memory_bundle.core.metrics import DEGRADED_RECORDS
from memory_bundle.models.entities import FullSessionRecord, SessionMetadata
from memory_bundle.security.paths import InvalidLocationError, PathEscapeError, resolve_within


class FullRecordLoader:
    """Reads session files under the project root.

    Any record that cannot be read safely is replaced by its metadata so a
    single bad entry never blocks the rest of the batch.
    """

    def __init__(
        self,
        project_root: Path,
        sessions_dir: Path,
        logger: logging.Logger | None = None,
    ) -> None:
        self.project_root = project_root
        self.sessions_dir = sessions_dir
        self.logger = logger or get_logger(__name__)

    def location_for(self, metadata: SessionMetadata) -> Path:
        if metadata.location:
            return Path(metadata.location)
        return self.sessions_dir / f"{metadata.id}.json"

    def load_full(self, matched: Sequence[SessionMetadata]) -> list[FullSessionRecord]:
        return [self.load_one(metadata) for metadata in matched]

    def load_one(self, metadata: SessionMetadata) -> FullSessionRecord:
        location = self.location_for(metadata)
        try:
            path = resolve_within(self.project_root, location)
        except PathEscapeError as exc:
            self.logger.warning(
                "Blocked session path outside project root: %s",
                exc.path,
                extra={"ctx_session_id": metadata.id, "ctx_path": str(location)},
            )
            return self._degraded(metadata, "path_outside_root")
        except InvalidLocationError as exc:
            self.logger.warning(
                "Rejected unusable session location: %s",
                exc.reason,
                extra={"ctx_session_id": metadata.id, "ctx_path": repr(location)},
            )
            return self._degraded(metadata, "invalid_location")

        try:
            if not path.is_file():
                self.logger.info("Session file %s not found; using metadata", path, extra={"ctx_session_id": metadata.id})
                return self._degraded(metadata, "missing")
            payload = orjson.loads(path.read_bytes())
        except OSError as exc:
            self.logger.warning("Failed to read session %s: %s", path, exc, extra={"ctx_session_id": metadata.id})
            return self._degraded(metadata, "unreadable")
        except orjson.JSONDecodeError as exc:
            self.logger.warning("Failed to parse session %s: %s", path, exc, extra={"ctx_session_id": metadata.id})
            return self._degraded(metadata, "invalid_json")

        if not isinstance(payload, dict):
            self.logger.warning("Session file %s is not a JSON object", path, extra={"ctx_session_id": metadata.id})
            return self._degraded(metadata, "invalid_shape")
        return FullSessionRecord(session_id=metadata.id, payload=payload)

    def _degraded(self, metadata: SessionMetadata, reason: str) -> FullSessionRecord:
        DEGRADED_RECORDS.labels(reason=reason).inc()
        return FullSessionRecord(
            session_id=metadata.id,
            payload=metadata.to_dict(),
            degraded=True,
            detail=reason,
        )


__all__ = ["FullRecordLoader"]
