"""Destination store for an export run.

HistoryStore owns the engine and session factory of one run. Writes go
through ``transaction()``, a scope that commits on normal exit and rolls
back on any exception.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from histdb.exceptions import DestinationError, PersistenceError
from histdb.storage.engine import (
    MEMORY_PATH,
    create_history_engine,
    create_session_factory,
    destination_exists,
    init_db,
)
from histdb.storage.sqlite import (
    SqliteCommitRelationRepository,
    SqliteCommitRepository,
    SqliteRefRepository,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Engine
    from sqlalchemy.orm import Session, sessionmaker

    from histdb.models.records import CommitRecord, CommitRelation, RefRecord

logger = logging.getLogger(__name__)


@dataclass
class StoreTransaction:
    """Insert primitives bound to one open transaction."""

    session: Session
    commits: SqliteCommitRepository
    relations: SqliteCommitRelationRepository
    refs: SqliteRefRepository

    @classmethod
    def bind(cls, session: Session) -> StoreTransaction:
        return cls(
            session=session,
            commits=SqliteCommitRepository(session),
            relations=SqliteCommitRelationRepository(session),
            refs=SqliteRefRepository(session),
        )

    def insert_commit(self, record: CommitRecord) -> None:
        self.commits.insert(record)

    def insert_relation(self, relation: CommitRelation) -> None:
        self.relations.insert(relation)

    def insert_reference(self, record: RefRecord) -> None:
        self.refs.insert(record)


class HistoryStore:
    """Exclusively owned handle on the destination database."""

    def __init__(
        self,
        engine: Engine,
        session_factory: sessionmaker[Session],
        *,
        location: str = MEMORY_PATH,
        created: bool = False,
    ) -> None:
        self._engine = engine
        self._session_factory = session_factory
        self.location = location
        self.created = created

    @classmethod
    def open(cls, db_path: str = MEMORY_PATH, *, url: str | None = None) -> HistoryStore:
        """Open the destination, creating its tables if it did not exist.

        Existence is checked before connecting. A destination given by
        *url* is treated as possibly existing, and only missing tables
        are created.

        Raises:
            DestinationError: If the destination cannot be opened.
            SchemaCreationError: If the tables cannot be created.
        """
        location = url if url is not None else db_path
        existed = url is None and destination_exists(db_path)

        try:
            engine = create_history_engine(db_path, url=url)
            # Force a connection so an unusable destination fails here
            with engine.connect():
                pass
        except (SQLAlchemyError, OSError) as e:
            raise DestinationError(location, str(e)) from e

        created = False
        if not existed:
            try:
                init_db(engine)
            except Exception:
                engine.dispose()
                raise
            created = url is None
            logger.info("Initialized tables in %s", location)

        return cls(
            engine,
            create_session_factory(engine),
            location=location,
            created=created,
        )

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Scope one atomic unit of inserts.

        Commits when the block exits normally. Any exception rolls back
        every insert made in the scope and propagates; database failures
        other than RecordConflictError are re-raised as PersistenceError.
        """
        session = self._session_factory()
        try:
            yield StoreTransaction.bind(session)
            session.commit()
        except PersistenceError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError(f"Transaction failed: {e}") from e
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def reader(self) -> Iterator[StoreTransaction]:
        """Read-only scope; never commits."""
        session = self._session_factory()
        try:
            yield StoreTransaction.bind(session)
        finally:
            session.rollback()
            session.close()

    def close(self) -> None:
        self._engine.dispose()

    def __enter__(self) -> HistoryStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
