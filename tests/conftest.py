"""Shared test fixtures for histdb.

Provides in-memory SQLite engine, session, repository and store fixtures,
plus an in-memory GraphSource for driving the exporter without git.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy.orm import Session, sessionmaker

from histdb.exceptions import GraphSourceError
from histdb.models.records import RefKind
from histdb.protocols import RawCommit, RawReference
from histdb.storage.engine import create_history_engine, init_db
from histdb.storage.sqlite import (
    SqliteCommitRelationRepository,
    SqliteCommitRepository,
    SqliteRefRepository,
)
from histdb.storage.store import HistoryStore


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    eng = create_history_engine(":memory:")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    """Session with automatic rollback after each test."""
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    sess = SessionLocal()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def commit_repo(session: Session) -> SqliteCommitRepository:
    return SqliteCommitRepository(session)


@pytest.fixture
def relation_repo(session: Session) -> SqliteCommitRelationRepository:
    return SqliteCommitRelationRepository(session)


@pytest.fixture
def ref_repo(session: Session) -> SqliteRefRepository:
    return SqliteRefRepository(session)


@pytest.fixture
def store():
    """Fresh in-memory HistoryStore."""
    s = HistoryStore.open(":memory:")
    yield s
    s.close()


# ------------------------------------------------------------------
# In-memory graph source
# ------------------------------------------------------------------

class FakeGraphSource:
    """GraphSource backed by plain lists.

    Ids listed in ``broken`` raise GraphSourceError on lookup, the same
    way an unreadable object does in a real repository.
    """

    def __init__(
        self,
        commits: list[RawCommit] | None = None,
        references: list[RawReference] | None = None,
        *,
        broken: set[str] | None = None,
    ) -> None:
        self.commits = list(commits or [])
        self.references = list(references or [])
        self.broken = set(broken or ())
        self._commits_by_id = {c.id: c for c in self.commits}
        self._refs_by_name = {r.name or "": r for r in self.references}

    def commit_ids(self) -> list[str]:
        return [c.id for c in self.commits]

    def get_commit(self, commit_id: str) -> RawCommit:
        if commit_id in self.broken:
            raise GraphSourceError(f"commit {commit_id}", "object not found")
        return self._commits_by_id[commit_id]

    def reference_names(self) -> list[str]:
        return [r.name or "" for r in self.references]

    def get_reference(self, name: str) -> RawReference:
        if name in self.broken:
            raise GraphSourceError(f"reference {name}", "unreadable ref")
        return self._refs_by_name[name]


class RecordingProgress:
    """ProgressReporter that records every callback."""

    def __init__(self) -> None:
        self.events: list[tuple] = []

    def stage_started(self, stage: str) -> None:
        self.events.append(("started", stage))

    def chunk_committed(self, stage: str, index: int, size: int) -> None:
        self.events.append(("chunk", stage, index, size))

    def stage_finished(self, stage: str, result) -> None:
        self.events.append(("finished", stage, result.written))


# ------------------------------------------------------------------
# Shared test helpers
# ------------------------------------------------------------------

def commit_id(i: int) -> str:
    """Deterministic 40-char hex-like id for the i-th synthetic commit."""
    return f"{i:040x}"


def make_linear_history(n: int) -> list[RawCommit]:
    """n commits in a single line, newest first (rev-list order).

    Commit 0 is the root; commit k has commit k-1 as its only parent.
    """
    commits = []
    for i in range(n):
        parents = (commit_id(i - 1),) if i > 0 else ()
        commits.append(
            RawCommit(
                id=commit_id(i),
                author=f"author-{i % 3}",
                date=1_700_000_000 + i * 60,
                message=f"commit {i}",
                parents=parents,
            )
        )
    commits.reverse()
    return commits


def make_refs(n: int, target: str | None = None) -> list[RawReference]:
    return [
        RawReference(
            name=f"refs/heads/branch-{i:03d}",
            target=target or commit_id(i),
            kind=RefKind.DIRECT,
        )
        for i in range(n)
    ]


# ------------------------------------------------------------------
# Throwaway git repositories
# ------------------------------------------------------------------

@pytest.fixture
def git_repo(tmp_path):
    """Empty git repository whose HEAD points at an unborn ``main``."""
    git = pytest.importorskip("git")
    repo = git.Repo.init(tmp_path / "repo")
    repo.git.symbolic_ref("HEAD", "refs/heads/main")
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "fixture")
        cw.set_value("user", "email", "fixture@example.com")
    yield repo
    repo.close()


def git_commit(repo, message, *, author="alice", date=1_700_000_000, parents=None, head=True):
    """Create a commit with an empty tree and return it."""
    from git import Actor

    actor = Actor(author, f"{author}@example.com")
    stamp = f"{date} +0000"
    return repo.index.commit(
        message,
        parent_commits=parents,
        head=head,
        author=actor,
        committer=actor,
        author_date=stamp,
        commit_date=stamp,
    )


def write_raw_commit(repo, tmp_path, data: bytes) -> str:
    """Store hand-written commit object bytes and return the new id."""
    path = tmp_path / "raw-commit"
    path.write_bytes(data)
    return repo.git.hash_object("-t", "commit", "-w", "--literally", str(path))


def remove_object(repo, hexsha: str) -> None:
    """Delete a loose object, leaving anything that references it dangling."""
    os.remove(os.path.join(repo.git_dir, "objects", hexsha[:2], hexsha[2:]))
