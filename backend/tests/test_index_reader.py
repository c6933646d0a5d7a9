"""Tests for the metadata store reader."""

from datetime import datetime, timezone
from pathlib import Path

from memory_bundle.ingest.index_reader import MetadataStore, parse_index
from memory_bundle.ingest.types import DualIndex, LegacyIndex


def test_dual_index_dedupes_by_session_id(tmp_path: Path, write_json, session_entry) -> None:
    index_path = write_json(
        tmp_path / "index.json",
        {
            "indices": {
                "recent": {"sessions": [session_entry("s1", keywords=["caching"]), session_entry("s2")]},
                "important": {"sessions": [session_entry("s1", keywords=["other"]), session_entry("s3")]},
            }
        },
    )
    result = MetadataStore(index_path).load()

    assert result.available is True
    index = result.value
    assert index.mode == "selective"
    assert [session.id for session in index.sessions] == ["s1", "s2", "s3"]
    assert index.sessions[0].keywords == ["caching"]
    assert [session.importance_rank for session in index.sessions] == [1, 2, 3]


def test_legacy_index_is_recognised(tmp_path: Path, write_json, session_entry) -> None:
    index_path = write_json(tmp_path / "index.json", {"sessions": [session_entry("old", rank=4)]})
    result = MetadataStore(index_path).load()

    assert result.available is True
    assert result.value.mode == "legacy"
    assert result.value.sessions[0].importance_rank == 4


def test_summary_falls_back_to_truncated_full_summary(tmp_path: Path, write_json) -> None:
    long_summary = "x" * 500
    index_path = write_json(
        tmp_path / "index.json",
        {"sessions": [{"session_id": "s1", "summary": long_summary, "key_topics": ["perf"]}]},
    )
    session = MetadataStore(index_path).load().value.sessions[0]

    assert session.summary_compact == "x" * 200
    assert session.topics == ["perf"]


def test_entries_without_id_are_skipped(tmp_path: Path, write_json, session_entry) -> None:
    index_path = write_json(tmp_path / "index.json", {"sessions": [{"summary": "orphan"}, session_entry("s1")]})
    sessions = MetadataStore(index_path).load().value.sessions

    assert [session.id for session in sessions] == ["s1"]


def test_missing_index_is_unavailable(tmp_path: Path) -> None:
    result = MetadataStore(tmp_path / "nope.json").load()

    assert result.available is False
    assert result.value.sessions == []
    assert result.detail == "missing"


def test_malformed_index_is_unavailable(tmp_path: Path) -> None:
    index_path = tmp_path / "index.json"
    index_path.write_text("{not json", encoding="utf-8")
    result = MetadataStore(index_path).load()

    assert result.available is False
    assert result.detail == "invalid_json"


def test_unknown_shape_is_unavailable(tmp_path: Path, write_json) -> None:
    index_path = write_json(tmp_path / "index.json", {"something": []})
    result = MetadataStore(index_path).load()

    assert result.available is False
    assert result.detail == "invalid_shape"


def test_parse_index_shapes() -> None:
    assert isinstance(parse_index({"sessions": []}), LegacyIndex)
    dual = parse_index({"indices": {"recent": {"sessions": [{"session_id": "a"}]}}})
    assert isinstance(dual, DualIndex)
    assert dual.important == []


def test_narrow_partition_filters_by_date(tmp_path: Path, write_json, session_entry) -> None:
    index_path = write_json(
        tmp_path / "index.json",
        {
            "sessions": [
                session_entry("fresh", date="2026-10-15T09:00:00Z"),
                session_entry("stale", date="2026-08-01T09:00:00Z"),
                session_entry("undated", date=None),
            ]
        },
    )
    index = MetadataStore(index_path).load().value
    now = datetime(2026, 10, 18, tzinfo=timezone.utc)

    assert [session.id for session in index.narrow(7, now)] == ["fresh"]
    assert len(index.sessions) == 3
