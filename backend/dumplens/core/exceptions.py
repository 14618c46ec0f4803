"""Application-specific exceptions."""

from typing import Optional


class DumpLensError(Exception):
    """Base class for all dumplens errors."""


class ParseAmbiguity(DumpLensError):
    """A statement did not match any recognized pattern.

    Raised inside the parsers and swallowed by the extractors: a dump is
    extracted on a best-effort basis, so one unreadable statement never
    rejects the whole file.
    """


class StatementExecutionFailure(DumpLensError):
    """A normalized statement was rejected by the store."""

    def __init__(self, index: int, statement: str, message: str):
        self.index = index
        self.statement = statement
        self.message = message
        super().__init__(f"Statement #{index} failed: {message}")


class SchemaNotFoundError(DumpLensError):
    """The schema artifact was requested before it was produced."""

    def __init__(self, session: str):
        self.session = session
        super().__init__(f"Session '{session}' is not initialized: no schema found")


class StoreUnavailableError(DumpLensError):
    """The relational store could not be opened or closed."""


class QueryError(DumpLensError):
    """A query was rejected by the store.

    Carries the store's own message so the caller can show it verbatim.
    """

    def __init__(self, message: str, sql: Optional[str] = None):
        self.message = message
        self.sql = sql
        super().__init__(message)


class InvalidSessionError(DumpLensError):
    """A session identifier that cannot be mapped to a storage directory."""
