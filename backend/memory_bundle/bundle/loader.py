"""Selective memory-bundle loading."""

from __future__ import annotations

import logging
from datetime import datetime

from memory_bundle.core.config import Settings
from memory_bundle.core.logging import get_logger
from memory_bundle.core.metrics import BUNDLE_LOADS
from memory_bundle.bundle.snapshot import SnapshotWriter
from memory_bundle.ingest.index_reader import MetadataStore
from memory_bundle.ingest.loaders import MemoryFiles
from memory_bundle.models.dto import Snapshot
from memory_bundle.models.entities import MissReason, SearchResult
from memory_bundle.retrieval.cascade import CascadingSearch
from memory_bundle.retrieval.records import FullRecordLoader
from memory_bundle.utils.text import tokenize

INDEX_UNAVAILABLE = "index unavailable"


class BundleLoader:
    """Coordinates tokenizing, metadata search, record loading and the snapshot write."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger | None = None,
        metadata_store: MetadataStore | None = None,
        search: CascadingSearch | None = None,
        record_loader: FullRecordLoader | None = None,
        memory_files: MemoryFiles | None = None,
        writer: SnapshotWriter | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or get_logger(__name__)
        self.metadata_store = metadata_store or MetadataStore(
            settings.index_path,
            summary_chars=settings.summary_max_chars,
            logger=self.logger,
        )
        self.search = search or CascadingSearch(settings, logger=self.logger)
        self.record_loader = record_loader or FullRecordLoader(
            settings.project_root,
            settings.sessions_path,
            logger=self.logger,
        )
        self.memory_files = memory_files or MemoryFiles(settings, logger=self.logger)
        self.writer = writer or SnapshotWriter(settings.snapshot_path, logger=self.logger)

    def load(
        self,
        query: str,
        cascading: bool | None = None,
        threshold: float | None = None,
        max_results: int | None = None,
        now: datetime | None = None,
    ) -> Snapshot:
        keywords = tokenize(query)
        limit = threshold if threshold is not None else self.settings.threshold
        metadata = self.metadata_store.load()
        index = metadata.value

        if metadata.available:
            outcome = self.search.search(
                keywords,
                index,
                now=now,
                cascading=cascading,
                threshold=limit,
                max_results=max_results,
            )
            result = outcome.result
            matched = outcome.matched
            layer = outcome.layer
            cascade = outcome.to_dict()
        else:
            self.logger.warning("Session index unavailable (%s); writing empty bundle", metadata.detail)
            result = SearchResult(
                found=False,
                query=tuple(keywords),
                matched_count=0,
                reason=MissReason(message=INDEX_UNAVAILABLE, threshold=limit, sessions_searched=0),
            )
            matched = []
            layer = None
            cascade = None

        records = self.record_loader.load_full(matched)
        snapshot = self.writer.write_snapshot(
            records,
            keywords,
            self.memory_files.auxiliary_context(),
            self.settings.ttl_seconds,
            mode=index.mode,
            search_result=result,
            index_available=metadata.available,
            layer=layer,
            cascade=cascade,
        )
        BUNDLE_LOADS.labels(mode=index.mode, layer=layer or "none").inc()
        return snapshot


__all__ = ["BundleLoader", "INDEX_UNAVAILABLE"]
