"""Abstract repository interfaces for histdb storage.

Defines ABC interfaces for all database operations. No SQLAlchemy
imports here -- pure abstract contracts.

Concrete implementations are in sqlite.py.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from histdb.models.records import CommitRecord, CommitRelation, RefRecord
    from histdb.storage.schema import CommitDetailsRow, RefDetailsRow


class CommitRepository(ABC):
    """Abstract interface for commit_details storage."""

    @abstractmethod
    def insert(self, record: CommitRecord) -> None:
        """Insert one commit row.

        Raises RecordConflictError if the id is already stored.
        """
        ...

    @abstractmethod
    def get(self, commit_id: str) -> CommitDetailsRow | None:
        """Get a commit by id. Returns None if not found."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Number of stored commits."""
        ...


class CommitRelationRepository(ABC):
    """Abstract interface for commit_relation storage."""

    @abstractmethod
    def insert(self, relation: CommitRelation) -> None:
        """Insert one parent -> child edge.

        Raises RecordConflictError if the edge is already stored.
        """
        ...

    @abstractmethod
    def get_parents(self, child: str) -> list[str]:
        """Parent ids recorded for a commit."""
        ...

    @abstractmethod
    def get_children(self, parent: str) -> list[str]:
        """Child ids recorded for a commit."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Number of stored edges."""
        ...


class RefRepository(ABC):
    """Abstract interface for ref_details storage."""

    @abstractmethod
    def insert(self, record: RefRecord) -> None:
        """Insert one reference row.

        Raises RecordConflictError if (name, id) is already stored.
        """
        ...

    @abstractmethod
    def get_by_name(self, name: str) -> Sequence[RefDetailsRow]:
        """All rows recorded for a reference name."""
        ...

    @abstractmethod
    def list_names(self) -> list[str]:
        """Distinct reference names, sorted."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Number of stored references."""
        ...
