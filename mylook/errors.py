"""Error taxonomy shared by the core engines."""

from __future__ import annotations


class MyLookError(RuntimeError):
    """Base class for all project errors."""


class NetworkFailure(MyLookError):
    """Raised on any HTTP non-success response or timeout."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ParseFailure(MyLookError):
    """Raised when an AI response cannot be coerced into the expected JSON shape."""


class PreconditionFailure(MyLookError):
    """Raised when a caller invokes an operation without meeting its precondition."""


class RecordNotFound(MyLookError):
    """Raised when a mutation targets an id that is not in the collection."""


class PartialMigrationFailure(MyLookError):
    """Aggregates per-record failures collected during a migration pass."""

    def __init__(self, collection: str, failures: dict[str, str]) -> None:
        self.collection = collection
        self.failures = dict(failures)
        super().__init__(f"{len(self.failures)} {collection} record(s) failed to migrate.")
