"""Export pipeline: graph source -> normalizer -> batcher -> store.

HistoryExporter runs two sub-pipelines over one destination store, commits
first and references second. Each chunk of records is written in its own
transaction; chunks run strictly one after another.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from histdb.batching import chunked
from histdb.exceptions import GraphSourceError
from histdb.models.config import DEFAULT_DB_PATH, DEFAULT_REPO_PATH, ExportConfig
from histdb.normalize import normalize_commit, normalize_reference
from histdb.storage.store import HistoryStore

if TYPE_CHECKING:
    from histdb.models.records import CommitRecord, CommitRelation, RefRecord
    from histdb.protocols import GraphSource, ProgressReporter

logger = logging.getLogger(__name__)

COMMITS_STAGE = "commits"
REFERENCES_STAGE = "references"


class StageResult(BaseModel):
    """Outcome of one sub-pipeline."""

    written: int = 0
    skipped: int = 0
    relations: int = 0
    chunks: int = 0


class ExportResult(BaseModel):
    """Outcome of a full export run."""

    commits: StageResult
    references: StageResult


class HistoryExporter:
    """Copies a repository's commit graph and references into a HistoryStore.

    Create via :meth:`open` for a git repository on disk, or construct
    directly with any GraphSource implementation.

    Example::

        with HistoryExporter.open("path/to/repo", "history.db") as exporter:
            result = exporter.run()
    """

    def __init__(
        self,
        source: GraphSource,
        store: HistoryStore,
        *,
        config: ExportConfig | None = None,
        progress: ProgressReporter | None = None,
    ) -> None:
        self._source = source
        self._store = store
        self._config = config or ExportConfig()
        self._progress = progress

    @classmethod
    def open(
        cls,
        repo_path: str = DEFAULT_REPO_PATH,
        db_path: str = DEFAULT_DB_PATH,
        *,
        url: str | None = None,
        config: ExportConfig | None = None,
        progress: ProgressReporter | None = None,
    ) -> HistoryExporter:
        """Open the repository and the destination store.

        The destination is opened only after the repository opened
        successfully, so a bad repository path leaves no database behind.

        Raises:
            RepositoryOpenError: If the repository cannot be opened.
            DestinationError: If the destination cannot be opened.
            SchemaCreationError: If the destination tables cannot be created.
        """
        from histdb.source import GitGraphSource

        config = config or ExportConfig()
        source = GitGraphSource.open(repo_path, order=config.traversal_order)
        try:
            store = HistoryStore.open(db_path, url=url)
        except Exception:
            source.close()
            raise
        return cls(source, store, config=config, progress=progress)

    @property
    def store(self) -> HistoryStore:
        return self._store

    # ------------------------------------------------------------------
    # Sub-pipelines
    # ------------------------------------------------------------------

    def run(self) -> ExportResult:
        """Export all commits, then all references."""
        commits = self.export_commits()
        references = self.export_references()
        return ExportResult(commits=commits, references=references)

    def export_commits(self) -> StageResult:
        """Persist every commit reachable from HEAD with its parent edges.

        Raises:
            PersistenceError: If a chunk transaction fails. Earlier chunks
                stay committed; later chunks are not attempted.
        """
        self._stage_started(COMMITS_STAGE)
        result = StageResult()

        normalized: list[tuple[CommitRecord, list[CommitRelation]]] = []
        for commit_id in self._source.commit_ids():
            try:
                raw = self._source.get_commit(commit_id)
            except GraphSourceError as e:
                logger.warning("Skipping commit: %s", e)
                result.skipped += 1
                continue
            normalized.append(normalize_commit(raw))

        for index, chunk in enumerate(chunked(normalized, self._config.chunk_size)):
            with self._store.transaction() as tx:
                for record, relations in chunk:
                    tx.insert_commit(record)
                    for relation in relations:
                        tx.insert_relation(relation)
            result.written += len(chunk)
            result.relations += sum(len(relations) for _, relations in chunk)
            result.chunks += 1
            self._chunk_committed(COMMITS_STAGE, index, len(chunk))

        logger.info(
            "Exported %d commits (%d relations, %d skipped)",
            result.written, result.relations, result.skipped,
        )
        self._stage_finished(COMMITS_STAGE, result)
        return result

    def export_references(self) -> StageResult:
        """Persist every reference the source exposes.

        Raises:
            PersistenceError: If a chunk transaction fails.
        """
        self._stage_started(REFERENCES_STAGE)
        result = StageResult()

        records: list[RefRecord] = []
        for name in self._source.reference_names():
            try:
                raw = self._source.get_reference(name)
            except GraphSourceError as e:
                logger.warning("Skipping reference: %s", e)
                result.skipped += 1
                continue
            records.append(normalize_reference(raw))

        for index, chunk in enumerate(chunked(records, self._config.chunk_size)):
            with self._store.transaction() as tx:
                for record in chunk:
                    tx.insert_reference(record)
            result.written += len(chunk)
            result.chunks += 1
            self._chunk_committed(REFERENCES_STAGE, index, len(chunk))

        logger.info("Exported %d references (%d skipped)", result.written, result.skipped)
        self._stage_finished(REFERENCES_STAGE, result)
        return result

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def _stage_started(self, stage: str) -> None:
        if self._progress is not None:
            self._progress.stage_started(stage)

    def _chunk_committed(self, stage: str, index: int, size: int) -> None:
        logger.debug("Committed %s chunk %d (%d records)", stage, index, size)
        if self._progress is not None:
            self._progress.chunk_committed(stage, index, size)

    def _stage_finished(self, stage: str, result: StageResult) -> None:
        if self._progress is not None:
            self._progress.stage_finished(stage, result)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._store.close()
        close_source = getattr(self._source, "close", None)
        if close_source is not None:
            close_source()

    def __enter__(self) -> HistoryExporter:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
