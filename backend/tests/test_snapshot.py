"""Tests for snapshot writing and reuse."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import orjson
import pytest

from memory_bundle.bundle.snapshot import SnapshotWriter, read_snapshot
from memory_bundle.models.entities import FullSessionRecord, MissReason, SearchResult, TopMatch


def _hit() -> SearchResult:
    return SearchResult(
        found=True,
        query=("caching",),
        matched_count=1,
        top_match=TopMatch(id="s1", percent_score=1.0, matched_keywords=("caching",)),
    )


def test_writes_camel_case_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "memory" / ".memory-bundle.json"
    writer = SnapshotWriter(path)
    writer.write_snapshot(
        [FullSessionRecord(session_id="s1", payload={"session_id": "s1", "notes": "x"})],
        ["caching"],
        {"project_name": "demo", "lessons": []},
        120,
        mode="selective",
        search_result=_hit(),
        layer="narrow",
    )

    data = orjson.loads(path.read_bytes())
    assert data["ttlSeconds"] == 120
    assert data["mode"] == "selective"
    assert data["matchedCount"] == 1
    assert data["matchedSessions"] == [{"session_id": "s1", "notes": "x"}]
    assert data["keywordsExtracted"] == ["caching"]
    assert data["searchResult"]["top_match"]["id"] == "s1"
    assert data["auxiliaryContext"]["project_name"] == "demo"
    assert "createdAt" in data


def test_overwrites_previous_snapshot(tmp_path: Path) -> None:
    path = tmp_path / ".memory-bundle.json"
    writer = SnapshotWriter(path)
    miss = SearchResult(found=False, query=(), matched_count=0, reason=MissReason(message="no keywords"))
    writer.write_snapshot([], ["first"], {}, 60, mode="legacy", search_result=miss)
    writer.write_snapshot([], ["second"], {}, 60, mode="selective", search_result=miss)

    snapshot = read_snapshot(path)
    assert snapshot is not None
    assert snapshot.keywords_extracted == ["second"]
    assert snapshot.mode == "selective"


def test_expiry_follows_ttl(tmp_path: Path) -> None:
    writer = SnapshotWriter(tmp_path / "snap.json")
    snapshot = writer.build([], [], {}, 30, mode="selective", search_result=_hit())

    assert snapshot.is_expired(snapshot.created_at + timedelta(seconds=10)) is False
    assert snapshot.is_expired(snapshot.created_at + timedelta(seconds=30)) is True


def test_read_snapshot_tolerates_garbage(tmp_path: Path) -> None:
    path = tmp_path / "snap.json"
    assert read_snapshot(path) is None
    path.write_text("[]", encoding="utf-8")
    assert read_snapshot(path) is None


def test_write_failure_propagates(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    writer = SnapshotWriter(blocker / "nested" / "snap.json")
    with pytest.raises(OSError):
        writer.write_snapshot([], [], {}, 60, mode="selective", search_result=_hit())


def test_naive_created_at_is_read_as_utc(tmp_path: Path) -> None:
    path = tmp_path / "snap.json"
    payload = {
        "createdAt": "2026-10-18T04:00:00",
        "ttlSeconds": 300,
        "mode": "selective",
        "indexAvailable": True,
        "keywordsExtracted": [],
        "matchedSessions": [],
        "matchedCount": 0,
        "searchResult": {},
    }
    path.write_bytes(orjson.dumps(payload))

    snapshot = read_snapshot(path)

    assert snapshot is not None
    assert snapshot.created_at == datetime(2026, 10, 18, 4, 0, tzinfo=timezone.utc)
    assert snapshot.is_expired(datetime(2026, 10, 18, 4, 4, tzinfo=timezone.utc)) is False
    assert snapshot.is_expired(datetime(2026, 10, 18, 4, 5, tzinfo=timezone.utc)) is True
