"""Tests for full-record resolution."""

from pathlib import Path

from memory_bundle.models.entities import SessionMetadata
from memory_bundle.retrieval.records import FullRecordLoader


def _meta(session_id: str, location: str | None = None) -> SessionMetadata:
    return SessionMetadata(
        id=session_id,
        date=None,
        keywords=["k"],
        topics=[],
        summary_compact="summary",
        importance_rank=1,
        location=location,
    )


def _loader(project_root: Path) -> FullRecordLoader:
    return FullRecordLoader(project_root, project_root / ".claude" / "memory" / "sessions")


def test_reads_session_from_derived_location(project_root: Path, memory_dir: Path, write_json) -> None:
    write_json(memory_dir / "sessions" / "s1.json", {"session_id": "s1", "messages": ["hi"]})
    (record,) = _loader(project_root).load_full([_meta("s1")])

    assert record.degraded is False
    assert record.payload["messages"] == ["hi"]


def test_reads_session_from_relative_file_path(project_root: Path, write_json) -> None:
    write_json(project_root / "archive" / "s2.json", {"session_id": "s2"})
    (record,) = _loader(project_root).load_full([_meta("s2", "archive/s2.json")])

    assert record.degraded is False
    assert record.to_dict() == {"session_id": "s2"}


def test_blocks_traversal_outside_root(project_root: Path, tmp_path: Path, write_json) -> None:
    secret = write_json(tmp_path / "secret.json", {"password": "hunter2"})
    loader = _loader(project_root)
    records = loader.load_full([_meta("evil", "../secret.json"), _meta("abs", str(secret)), _meta("etc", "../../etc/passwd")])

    for record in records:
        assert record.degraded is True
        assert record.detail == "path_outside_root"
        assert "password" not in record.payload
    assert records[0].payload["session_id"] == "evil"


def test_missing_and_broken_records_degrade_individually(project_root: Path, memory_dir: Path, write_json) -> None:
    write_json(memory_dir / "sessions" / "good.json", {"session_id": "good"})
    (memory_dir / "sessions" / "broken.json").write_text("{oops", encoding="utf-8")
    write_json(memory_dir / "sessions" / "list.json", [1, 2, 3])

    records = _loader(project_root).load_full([_meta("missing"), _meta("broken"), _meta("good"), _meta("list")])

    assert [record.session_id for record in records] == ["missing", "broken", "good", "list"]
    assert [record.detail for record in records] == ["missing", "invalid_json", None, "invalid_shape"]
    entry = records[0].to_dict()
    assert entry["degraded"] is True
    assert entry["summary_compact"] == "summary"


def test_unusable_locations_degrade_without_blocking_the_batch(project_root: Path, memory_dir: Path, write_json) -> None:
    write_json(memory_dir / "sessions" / "good.json", {"session_id": "good", "messages": ["ok"]})

    records = _loader(project_root).load_full(
        [_meta("good"), _meta("nul", "sessions/a\x00b.json"), _meta("a\x00b")]
    )

    assert [record.degraded for record in records] == [False, True, True]
    assert records[0].payload["messages"] == ["ok"]
    assert [record.detail for record in records[1:]] == ["invalid_location", "invalid_location"]
    assert records[1].payload["session_id"] == "nul"


def test_tilde_location_is_not_expanded(project_root: Path) -> None:
    (record,) = _loader(project_root).load_full([_meta("tilde", "~nosuchuser_zz/x.json")])

    assert record.degraded is True
    assert record.detail == "missing"
