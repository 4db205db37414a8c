"""SQLAlchemy ORM schema for histdb.

Defines the three destination tables: commit_details, commit_relation,
ref_details.

RefKind is imported from the domain models and stored by value
("Direct", "Symbolic", "Unknown"), so the column stays plain TEXT.
"""

from __future__ import annotations

from sqlalchemy import Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all histdb ORM models."""

    pass


class CommitDetailsRow(Base):
    """A commit's metadata. Keyed by the commit id."""

    __tablename__ = "commit_details"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    author: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[int] = mapped_column(Integer, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)


class CommitRelationRow(Base):
    """A parent -> child edge. One row per parent of a commit.

    No foreign keys: a chunk may hold a child whose parents land in a
    later chunk.
    """

    __tablename__ = "commit_relation"

    parent: Mapped[str] = mapped_column(Text, primary_key=True)
    child: Mapped[str] = mapped_column(Text, primary_key=True)


class RefDetailsRow(Base):
    """A named reference and the id it resolves to."""

    __tablename__ = "ref_details"

    name: Mapped[str] = mapped_column(Text, primary_key=True)
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    kind: Mapped[str] = mapped_column(Text, nullable=False)
