"""histdb: copy a git repository's commit graph and references into SQL.

Commits reachable from HEAD land in ``commit_details`` with one
``commit_relation`` row per parent edge; every reference lands in
``ref_details``.
"""

from histdb._version import __version__

# Core entry point
from histdb.pipeline import ExportResult, HistoryExporter, StageResult

# Records and configuration
from histdb.models.records import CommitRecord, CommitRelation, RefKind, RefRecord
from histdb.models.config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DB_PATH,
    DEFAULT_REPO_PATH,
    DEFAULT_TRAVERSAL_ORDER,
    ExportConfig,
    TraversalOrder,
)

# Protocols
from histdb.protocols import GraphSource, ProgressReporter, RawCommit, RawReference

# Pipeline stages
from histdb.batching import chunked
from histdb.normalize import normalize_commit, normalize_reference

# Storage
from histdb.storage.store import HistoryStore, StoreTransaction

# Exceptions
from histdb.exceptions import (
    DestinationError,
    GraphSourceError,
    HistdbError,
    PersistenceError,
    RecordConflictError,
    RepositoryOpenError,
    SchemaCreationError,
)

__all__ = [
    "__version__",
    "HistoryExporter",
    "ExportResult",
    "StageResult",
    "CommitRecord",
    "CommitRelation",
    "RefKind",
    "RefRecord",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_DB_PATH",
    "DEFAULT_REPO_PATH",
    "DEFAULT_TRAVERSAL_ORDER",
    "ExportConfig",
    "TraversalOrder",
    "GraphSource",
    "ProgressReporter",
    "RawCommit",
    "RawReference",
    "chunked",
    "normalize_commit",
    "normalize_reference",
    "HistoryStore",
    "StoreTransaction",
    "HistdbError",
    "RepositoryOpenError",
    "DestinationError",
    "GraphSourceError",
    "PersistenceError",
    "SchemaCreationError",
    "RecordConflictError",
]
