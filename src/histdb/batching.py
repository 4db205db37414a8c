"""Fixed-size partitioning of record sequences."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from itertools import islice
from typing import TypeVar

from histdb.models.config import DEFAULT_CHUNK_SIZE

T = TypeVar("T")


def chunked(records: Iterable[T], size: int = DEFAULT_CHUNK_SIZE) -> Iterator[list[T]]:
    """Yield consecutive chunks of at most *size* records.

    Order is preserved within and across chunks; only the last chunk may
    be short. An empty input yields nothing.

    Raises:
        ValueError: If *size* is smaller than 1.
    """
    if size < 1:
        raise ValueError(f"Chunk size must be at least 1, got {size}")

    it = iter(records)
    while True:
        chunk = list(islice(it, size))
        if not chunk:
            return
        yield chunk
