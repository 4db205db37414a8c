"""Protocol definitions for histdb.

Defines the pluggable interfaces (GraphSource, ProgressReporter) and the
frozen dataclasses a graph source hands to the normalizer.

No SQLAlchemy or GitPython imports allowed in this module -- pure domain
protocols.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from histdb.models.records import RefKind

if TYPE_CHECKING:
    from histdb.pipeline import StageResult


@dataclass(frozen=True)
class RawCommit:
    """A commit as read from the repository.

    ``None`` marks a field the repository could not supply (missing or
    not decodable). The normalizer substitutes fallbacks for those.
    """

    id: str
    author: str | None
    date: int
    message: str | None
    parents: tuple[str, ...] = ()


@dataclass(frozen=True)
class RawReference:
    """A named reference as read from the repository.

    ``target`` is None for symbolic references and for direct references
    whose object cannot be found.
    """

    name: str | None
    target: str | None
    kind: RefKind | None


@runtime_checkable
class GraphSource(Protocol):
    """Read-only view of a repository's commit graph and references.

    ``commit_ids`` and ``reference_names`` are materialized up front.
    ``get_commit`` and ``get_reference`` raise GraphSourceError for an
    item that cannot be resolved.
    """

    def commit_ids(self) -> list[str]:
        """Ids of every commit reachable from HEAD, descendants first."""
        ...

    def get_commit(self, commit_id: str) -> RawCommit:
        ...

    def reference_names(self) -> list[str]:
        """Names of every reference (branches, tags, remotes)."""
        ...

    def get_reference(self, name: str) -> RawReference:
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Receives informational status updates from the exporter."""

    def stage_started(self, stage: str) -> None:
        ...

    def chunk_committed(self, stage: str, index: int, size: int) -> None:
        ...

    def stage_finished(self, stage: str, result: StageResult) -> None:
        ...
