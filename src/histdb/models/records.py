"""Record models for histdb.

CommitRecord, CommitRelation and RefRecord are the flat rows the exporter
writes. They are created once by the normalizer and never mutated.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel


class RefKind(str, enum.Enum):
    """How a reference points at its target."""

    DIRECT = "Direct"
    SYMBOLIC = "Symbolic"
    UNKNOWN = "Unknown"


class CommitRecord(BaseModel):
    """One row of ``commit_details`` plus the ordered parent list."""

    model_config = {"frozen": True}

    id: str
    author: str
    date: int
    message: str
    parents: tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


class CommitRelation(BaseModel):
    """A parent -> child edge of the commit graph."""

    model_config = {"frozen": True}

    parent: str
    child: str


class RefRecord(BaseModel):
    """One row of ``ref_details``."""

    model_config = {"frozen": True}

    name: str
    id: str
    kind: RefKind
