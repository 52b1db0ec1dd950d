"""Errors raised by the token storage layer."""
from __future__ import annotations

from pathlib import Path


class StorageError(RuntimeError):
    """Base class for storage failures the token store knows how to report."""


class StorageInitializationError(StorageError):
    """Raised when the database file cannot be opened or migrated."""

    def __init__(self, database_path: Path, reason: str):
        super().__init__(f"Unable to initialize token database at {database_path}: {reason}")
        self.database_path = database_path


class StorageNotInitializedError(StorageError):
    """Raised when a query is issued before ``StorageService.initialize`` ran."""


class CorruptRecordError(StorageError):
    """Raised when a stored row holds a value that cannot be decoded."""

    def __init__(self, username: str, column: str, value: object):
        super().__init__(f"Token row for {username!r} has an unreadable {column}: {value!r}")
        self.username = username
        self.column = column
