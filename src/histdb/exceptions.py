"""histdb exception hierarchy.

All histdb-specific exceptions inherit from HistdbError.
"""


class HistdbError(Exception):
    """Base exception for all histdb errors."""


class RepositoryOpenError(HistdbError):
    """Raised when the source repository cannot be located or opened."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to open the repository at {path}: {reason}")


class DestinationError(HistdbError):
    """Raised when the destination store cannot be opened."""

    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f"Failed to open database {location}: {reason}")


class GraphSourceError(HistdbError):
    """Raised when a single commit or reference cannot be resolved.

    This is the one recoverable error: the exporter logs it and skips
    the offending item.
    """

    def __init__(self, item: str, reason: str) -> None:
        self.item = item
        self.reason = reason
        super().__init__(f"Failed to process {item}: {reason}")


class PersistenceError(HistdbError):
    """Raised when writing to the destination store fails."""


class SchemaCreationError(PersistenceError):
    """Raised when the destination tables cannot be created."""


class RecordConflictError(PersistenceError):
    """Raised when an insert collides with an existing primary key.

    Re-running an export against a store that already holds the same
    commits or references ends here. There is no upsert path.
    """

    def __init__(self, table: str, key: tuple[str, ...]) -> None:
        self.table = table
        self.key = key
        super().__init__(
            f"Record already exists in {table}: {', '.join(key)}"
        )
