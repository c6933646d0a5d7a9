"""Metadata store reader for the persisted session index."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

from memory_bundle.core.logging import get_logger
from memory_bundle.ingest.dedupe import dedupe_sessions, session_key
from memory_bundle.ingest.loaders import read_json
from memory_bundle.ingest.types import DualIndex, IndexFormat, LegacyIndex, LoadResult, MetadataIndex
from memory_bundle.models.entities import SessionMetadata
from memory_bundle.utils.text import truncate

DEFAULT_SUMMARY_CHARS = 200


def parse_index(payload: Any) -> IndexFormat:
    """Resolve the raw index JSON into one of the supported shapes.

    Raises ``ValueError`` for anything that is neither the dual
    ``indices.recent``/``indices.important`` layout nor a legacy flat
    ``sessions`` list.
    """
    if not isinstance(payload, Mapping):
        raise ValueError("index root must be an object")
    indices = payload.get("indices")
    if isinstance(indices, Mapping):
        return DualIndex(
            recent=_partition_sessions(indices.get("recent")),
            important=_partition_sessions(indices.get("important")),
        )
    sessions = payload.get("sessions")
    if isinstance(sessions, list):
        return LegacyIndex(sessions=[item for item in sessions if isinstance(item, Mapping)])
    raise ValueError("index has neither 'indices' nor 'sessions'")


def project_metadata(
    record: Mapping[str, Any],
    position: int,
    summary_chars: int = DEFAULT_SUMMARY_CHARS,
) -> SessionMetadata | None:
    """Project a raw session record down to its searchable metadata."""
    session_id = session_key(record)
    if session_id is None:
        return None
    summary = record.get("summary_compact")
    if not isinstance(summary, str) or not summary:
        full_summary = record.get("summary")
        summary = truncate(full_summary, summary_chars) if isinstance(full_summary, str) else ""
    location = record.get("file_path")
    return SessionMetadata(
        id=session_id,
        date=record.get("date") if isinstance(record.get("date"), str) else None,
        keywords=_string_list(record.get("keywords")),
        topics=_string_list(record.get("key_topics", record.get("topics"))),
        summary_compact=summary,
        importance_rank=_rank(record, position),
        location=str(location) if location else None,
    )


class MetadataStore:
    """Loads lightweight session metadata from the on-disk index."""

    def __init__(
        self,
        index_path: Path,
        summary_chars: int = DEFAULT_SUMMARY_CHARS,
        logger: logging.Logger | None = None,
    ) -> None:
        self.index_path = index_path
        self.summary_chars = summary_chars
        self.logger = logger or get_logger(__name__)

    def load(self) -> LoadResult[MetadataIndex]:
        raw = read_json(self.index_path, self.logger)
        if not raw.available:
            return self._unavailable(raw.detail)
        try:
            index_format = parse_index(raw.value)
        except ValueError as exc:
            self.logger.warning("Unrecognised index format in %s: %s", self.index_path, exc)
            return self._unavailable("invalid_shape")

        records = index_format.raw_sessions()
        unique = dedupe_sessions(records)
        if len(unique) != len(records):
            self.logger.debug("Dropped %s duplicate session entries", len(records) - len(unique))

        sessions: list[SessionMetadata] = []
        for record in unique:
            metadata = project_metadata(record, position=len(sessions) + 1, summary_chars=self.summary_chars)
            if metadata is None:
                self.logger.warning("Skipping index entry without session_id in %s", self.index_path)
                continue
            sessions.append(metadata)
        self.logger.info(
            "Loaded %s sessions from %s index",
            len(sessions),
            index_format.mode,
            extra={"ctx_index_mode": index_format.mode, "ctx_sessions": len(sessions)},
        )
        return LoadResult(
            value=MetadataIndex(sessions=sessions, mode=index_format.mode),
            available=True,
            path=self.index_path,
        )

    def _unavailable(self, detail: str | None) -> LoadResult[MetadataIndex]:
        return LoadResult(
            value=MetadataIndex(sessions=[], mode="selective"),
            available=False,
            path=self.index_path,
            detail=detail,
        )


def _partition_sessions(partition: Any) -> list[Mapping[str, Any]]:
    if isinstance(partition, Mapping):
        partition = partition.get("sessions")
    if not isinstance(partition, Sequence) or isinstance(partition, (str, bytes)):
        return []
    return [item for item in partition if isinstance(item, Mapping)]


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, Sequence):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float)) and str(item)]


def _rank(record: Mapping[str, Any], position: int) -> int:
    for key in ("importance_rank", "rank"):
        value = record.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            return int(value)
    return position


__all__ = ["MetadataStore", "parse_index", "project_metadata"]
