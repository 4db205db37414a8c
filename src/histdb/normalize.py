"""Mapping of raw repository items onto storable records.

Pure functions: every raw input maps to a valid record. Missing optional
fields are replaced with the fallbacks from histdb.models.config.
"""

from __future__ import annotations

from histdb.models.config import NO_MESSAGE, UNKNOWN_AUTHOR, UNKNOWN_TARGET, UNNAMED_REF
from histdb.models.records import CommitRecord, CommitRelation, RefKind, RefRecord
from histdb.protocols import RawCommit, RawReference


def normalize_commit(raw: RawCommit) -> tuple[CommitRecord, list[CommitRelation]]:
    """Build the commit row and one relation edge per parent.

    Edges follow the parent order. A root commit yields no edges.
    """
    record = CommitRecord(
        id=raw.id,
        author=raw.author if raw.author is not None else UNKNOWN_AUTHOR,
        date=raw.date,
        message=raw.message if raw.message is not None else NO_MESSAGE,
        parents=tuple(raw.parents),
    )
    return record, relations_for(record)


def relations_for(record: CommitRecord) -> list[CommitRelation]:
    return [CommitRelation(parent=parent, child=record.id) for parent in record.parents]


def normalize_reference(raw: RawReference) -> RefRecord:
    return RefRecord(
        name=raw.name if raw.name is not None else UNNAMED_REF,
        id=raw.target if raw.target is not None else UNKNOWN_TARGET,
        kind=raw.kind if raw.kind is not None else RefKind.UNKNOWN,
    )
