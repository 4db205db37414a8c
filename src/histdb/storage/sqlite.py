"""SQLite implementations of repository interfaces.

All repositories use SQLAlchemy 2.0-style queries (select() + session.execute()).
Each repository takes a Session in its constructor and never commits:
transaction boundaries belong to HistoryStore.transaction().
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import FlushError

from histdb.exceptions import RecordConflictError
from histdb.models.records import CommitRecord, CommitRelation, RefRecord
from histdb.storage.repositories import (
    CommitRelationRepository,
    CommitRepository,
    RefRepository,
)
from histdb.storage.schema import CommitDetailsRow, CommitRelationRow, RefDetailsRow


def _insert_row(session: Session, row: object, table: str, key: tuple[str, ...]) -> None:
    """Add one row and flush it so the INSERT is issued immediately.

    A key already in the database raises IntegrityError; a key already
    added in this session raises FlushError from the identity map.
    """
    session.add(row)
    try:
        session.flush()
    except (IntegrityError, FlushError) as e:
        raise RecordConflictError(table, key) from e


class SqliteCommitRepository(CommitRepository):
    """SQLite implementation of commit repository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def insert(self, record: CommitRecord) -> None:
        row = CommitDetailsRow(
            id=record.id,
            author=record.author,
            date=record.date,
            message=record.message,
        )
        _insert_row(self._session, row, CommitDetailsRow.__tablename__, (record.id,))

    def get(self, commit_id: str) -> CommitDetailsRow | None:
        stmt = select(CommitDetailsRow).where(CommitDetailsRow.id == commit_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def count(self) -> int:
        stmt = select(func.count()).select_from(CommitDetailsRow)
        return self._session.execute(stmt).scalar_one()


class SqliteCommitRelationRepository(CommitRelationRepository):
    """SQLite implementation of the parent/child edge table."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def insert(self, relation: CommitRelation) -> None:
        row = CommitRelationRow(parent=relation.parent, child=relation.child)
        _insert_row(
            self._session,
            row,
            CommitRelationRow.__tablename__,
            (relation.parent, relation.child),
        )

    def get_parents(self, child: str) -> list[str]:
        stmt = (
            select(CommitRelationRow.parent)
            .where(CommitRelationRow.child == child)
            .order_by(CommitRelationRow.parent)
        )
        return list(self._session.execute(stmt).scalars().all())

    def get_children(self, parent: str) -> list[str]:
        stmt = (
            select(CommitRelationRow.child)
            .where(CommitRelationRow.parent == parent)
            .order_by(CommitRelationRow.child)
        )
        return list(self._session.execute(stmt).scalars().all())

    def count(self) -> int:
        stmt = select(func.count()).select_from(CommitRelationRow)
        return self._session.execute(stmt).scalar_one()


class SqliteRefRepository(RefRepository):
    """SQLite implementation of ref repository.

    Rows are keyed by (name, id). Symbolic references carry id="Unknown".
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def insert(self, record: RefRecord) -> None:
        row = RefDetailsRow(name=record.name, id=record.id, kind=record.kind.value)
        _insert_row(
            self._session,
            row,
            RefDetailsRow.__tablename__,
            (record.name, record.id),
        )

    def get_by_name(self, name: str) -> Sequence[RefDetailsRow]:
        stmt = select(RefDetailsRow).where(RefDetailsRow.name == name)
        return list(self._session.execute(stmt).scalars().all())

    def list_names(self) -> list[str]:
        stmt = select(RefDetailsRow.name).distinct().order_by(RefDetailsRow.name)
        return list(self._session.execute(stmt).scalars().all())

    def count(self) -> int:
        stmt = select(func.count()).select_from(RefDetailsRow)
        return self._session.execute(stmt).scalar_one()
