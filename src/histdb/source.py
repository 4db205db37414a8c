"""GitPython-backed graph source.

GitGraphSource walks the commits reachable from HEAD and enumerates every
reference under ``refs/``. Individual items that fail to resolve raise
GraphSourceError so the exporter can skip them.
"""

from __future__ import annotations

import logging
import os
from collections import deque

import git

from histdb.exceptions import GraphSourceError, RepositoryOpenError
from histdb.models.config import DEFAULT_TRAVERSAL_ORDER, TraversalOrder
from histdb.models.records import RefKind
from histdb.protocols import RawCommit, RawReference

logger = logging.getLogger(__name__)

# Errors GitPython and gitdb raise for a single unreadable object or ref
_ITEM_ERRORS = (ValueError, TypeError, OSError, git.exc.ODBError, git.exc.GitCommandError)

_AUTHOR_HEADER = b"author "
_ENCODING_HEADER = b"encoding "
_DEFAULT_ENCODING = "UTF-8"


def open_repository(path: str) -> git.Repo:
    """Open the repository at *path*, resolved against the working directory.

    Raises:
        RepositoryOpenError: If *path* does not exist or is not a git repository.
    """
    abs_path = os.path.abspath(path)
    try:
        return git.Repo(abs_path)
    except git.exc.NoSuchPathError as e:
        raise RepositoryOpenError(abs_path, "no such path") from e
    except git.exc.InvalidGitRepositoryError as e:
        raise RepositoryOpenError(abs_path, "not a git repository") from e


def _decode_strict(data: bytes, encoding: str) -> str | None:
    try:
        return data.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        return None


def _author_and_message(commit: git.Commit) -> tuple[str | None, str | None]:
    """Author name and message decoded strictly from the raw commit object.

    GitPython replaces undecodable bytes when it parses a commit, so both
    values are read from the object data instead, in the encoding the
    commit declares.
    """
    data = commit.data_stream.read()
    header, _, message = data.partition(b"\n\n")
    author_line = None
    encoding = _DEFAULT_ENCODING
    for line in header.split(b"\n"):
        if line.startswith(_AUTHOR_HEADER) and author_line is None:
            author_line = line[len(_AUTHOR_HEADER):]
        elif line.startswith(_ENCODING_HEADER):
            encoding = line[len(_ENCODING_HEADER):].decode("ascii", "ignore").strip()

    author = None
    if author_line is not None:
        name, sep, _ = author_line.rpartition(b" <")
        if sep:
            author = _decode_strict(name, encoding)
    return author, _decode_strict(message, encoding)


class GitGraphSource:
    """GraphSource over a GitPython ``Repo``."""

    def __init__(
        self,
        repo: git.Repo,
        *,
        order: TraversalOrder = DEFAULT_TRAVERSAL_ORDER,
    ) -> None:
        self._repo = repo
        self._order = order

    @classmethod
    def open(
        cls,
        path: str,
        *,
        order: TraversalOrder = DEFAULT_TRAVERSAL_ORDER,
    ) -> GitGraphSource:
        return cls(open_repository(path), order=order)

    @property
    def repo(self) -> git.Repo:
        return self._repo

    def commit_ids(self) -> list[str]:
        """Every commit reachable from HEAD, in rev-list order.

        A repository whose HEAD has no commit yet yields an empty list. If
        rev-list cannot traverse the history, parents are walked from HEAD
        instead, and commits that cannot be read are listed without their
        ancestors.
        """
        if not self._repo.head.is_valid():
            logger.warning("HEAD of %s does not point at a commit", self._repo.working_dir)
            return []
        try:
            return [
                commit.hexsha
                for commit in self._repo.iter_commits("HEAD", **self._order.rev_list_flags)
            ]
        except git.exc.GitCommandError as e:
            logger.warning("rev-list failed, walking parents from HEAD: %s", e)
        return self._walk_parents(self._repo.head.commit.hexsha)

    def _walk_parents(self, start: str) -> list[str]:
        ids: list[str] = []
        seen = {start}
        pending = deque([start])
        while pending:
            commit_id = pending.popleft()
            ids.append(commit_id)
            try:
                parents = [parent.hexsha for parent in self._repo.commit(commit_id).parents]
            except _ITEM_ERRORS as e:
                logger.debug("Cannot read parents of %s: %s", commit_id, e)
                continue
            for parent in parents:
                if parent not in seen:
                    seen.add(parent)
                    pending.append(parent)
        return ids

    def get_commit(self, commit_id: str) -> RawCommit:
        try:
            commit = self._repo.commit(commit_id)
            author, message = _author_and_message(commit)
            return RawCommit(
                id=commit.hexsha,
                author=author,
                date=int(commit.committed_date),
                message=message,
                parents=tuple(parent.hexsha for parent in commit.parents),
            )
        except _ITEM_ERRORS as e:
            raise GraphSourceError(f"commit {commit_id}", str(e)) from e

    def reference_names(self) -> list[str]:
        return [ref.path for ref in self._repo.references]

    def get_reference(self, name: str) -> RawReference:
        ref = git.SymbolicReference(self._repo, name)
        try:
            # is_detached is True when the ref names an object directly
            direct = ref.is_detached
        except _ITEM_ERRORS as e:
            raise GraphSourceError(f"reference {name}", str(e)) from e

        if not direct:
            return RawReference(name=name, target=None, kind=RefKind.SYMBOLIC)

        try:
            # Stored id only; the object itself may be missing
            target = git.SymbolicReference.dereference_recursive(self._repo, name)
        except _ITEM_ERRORS as e:
            logger.debug("Reference %s has no readable target: %s", name, e)
            target = None
        return RawReference(name=name, target=target, kind=RefKind.DIRECT)

    def close(self) -> None:
        self._repo.close()
