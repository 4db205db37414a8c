"""Configuration models for histdb.

ExportConfig holds per-run settings. TraversalOrder selects the order in
which the commit graph is walked. The module-level constants are the
defaults shared by the CLI, the normalizer and the exporter.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field


class TraversalOrder(str, enum.Enum):
    """Commit walk order, mapped onto ``git rev-list`` flags."""

    DEFAULT = "default"  # reverse chronological, as rev-list emits it
    TOPOLOGICAL = "topo"
    DATE = "date"

    @property
    def rev_list_flags(self) -> dict[str, bool]:
        """Keyword flags for ``Repo.iter_commits``."""
        if self is TraversalOrder.TOPOLOGICAL:
            return {"topo_order": True}
        if self is TraversalOrder.DATE:
            return {"date_order": True}
        return {}


UNKNOWN_AUTHOR = "Unknown"
NO_MESSAGE = "No message"
UNKNOWN_TARGET = "Unknown"
UNNAMED_REF = ""

DEFAULT_CHUNK_SIZE = 50
DEFAULT_TRAVERSAL_ORDER = TraversalOrder.DEFAULT
DEFAULT_REPO_PATH = "."
DEFAULT_DB_PATH = "git_info.db"


class ExportConfig(BaseModel):
    """Per-run export configuration."""

    model_config = {"frozen": True}

    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, ge=1)
    traversal_order: TraversalOrder = DEFAULT_TRAVERSAL_ORDER
