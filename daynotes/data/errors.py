from __future__ import annotations

import sqlite3
from enum import StrEnum


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    IO_FAILURE = "io_failure"
    CONSTRAINT_VIOLATION = "constraint_violation"
    SCHEMA_MISMATCH = "schema_mismatch"


class StorageError(Exception):
    """A failed repository operation.

    ``str(error)`` is a human-readable message; ``kind`` lets callers branch
    on the failure class without matching message text.
    """

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    @classmethod
    def from_sqlite(cls, exc: sqlite3.Error) -> StorageError:
        return cls(classify(exc), str(exc))


class StartupError(Exception):
    """Base class for errors that abort application startup."""


class DirectoryResolutionError(StartupError):
    pass


class DatabaseConnectionError(StartupError):
    pass


class SchemaError(StartupError):
    pass


_SCHEMA_MARKERS = ("no such table", "no such column", "has no column named")


def classify(exc: sqlite3.Error) -> ErrorKind:
    if isinstance(exc, sqlite3.IntegrityError):
        return ErrorKind.CONSTRAINT_VIOLATION
    message = str(exc).lower()
    if any(marker in message for marker in _SCHEMA_MARKERS):
        return ErrorKind.SCHEMA_MISMATCH
    return ErrorKind.IO_FAILURE
