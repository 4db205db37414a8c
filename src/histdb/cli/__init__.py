"""histdb CLI -- export a git repository's history into a database.

This module is NEVER imported from histdb/__init__.py.
It is only loaded via the ``histdb`` entry point defined in pyproject.toml
or ``python -m histdb``.
"""

from __future__ import annotations

import logging

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install histdb[cli]"
    ) from None

from histdb.cli.formatting import (
    ConsoleProgress,
    format_created,
    format_error,
    format_summary,
    get_console,
)
from histdb.exceptions import HistdbError
from histdb.models.config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DB_PATH,
    DEFAULT_REPO_PATH,
    DEFAULT_TRAVERSAL_ORDER,
    ExportConfig,
    TraversalOrder,
)


@click.command()
@click.argument("repo_path", default=DEFAULT_REPO_PATH, required=False)
@click.argument("db_path", default=DEFAULT_DB_PATH, required=False)
@click.option(
    "--url",
    default=None,
    envvar="HISTDB_URL",
    help="SQLAlchemy database URL (overrides DB_PATH).",
)
@click.option(
    "--chunk-size",
    default=DEFAULT_CHUNK_SIZE,
    envvar="HISTDB_CHUNK_SIZE",
    type=click.IntRange(min=1),
    show_default=True,
    help="Records written per transaction.",
)
@click.option(
    "--order",
    default=DEFAULT_TRAVERSAL_ORDER.value,
    envvar="HISTDB_ORDER",
    type=click.Choice([o.value for o in TraversalOrder], case_sensitive=False),
    show_default=True,
    help="Commit traversal order.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log every committed chunk.")
def cli(
    repo_path: str,
    db_path: str,
    url: str | None,
    chunk_size: int,
    order: str,
    verbose: bool,
) -> None:
    """Store the commit history and references of REPO_PATH in DB_PATH."""
    from histdb.pipeline import HistoryExporter

    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )
    logging.getLogger("histdb").setLevel(logging.DEBUG if verbose else logging.WARNING)

    console = get_console()
    config = ExportConfig(chunk_size=chunk_size, traversal_order=TraversalOrder(order.lower()))
    progress = ConsoleProgress(console, show_chunks=verbose)

    try:
        exporter = HistoryExporter.open(
            repo_path, db_path, url=url, config=config, progress=progress
        )
        with exporter:
            if exporter.store.created:
                format_created(exporter.store.location, console)
            result = exporter.run()
    except HistdbError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    format_summary(result, console)
