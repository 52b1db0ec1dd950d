"""Persistence layer for Trakt OAuth tokens, SQLite via aiosqlite with Alembic migrations."""
from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import aiosqlite

from services.exceptions import CorruptRecordError, StorageInitializationError, StorageNotInitializedError
from services.migrations import run_migrations


def current_time_millis() -> int:
    return int(time.time() * 1000)


def _parse_datetime(value: Optional[str], *, username: str, column: str) -> datetime:
    if not value or not isinstance(value, str):
        raise CorruptRecordError(username, column, value)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise CorruptRecordError(username, column, value) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class TokenRecord:
    """Represents one row of the ``tokens`` table."""

    username: str
    access_token: str
    refresh_token: str
    expires_at: int
    created_at: datetime
    updated_at: datetime

    @property
    def expires_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at / 1000, tz=timezone.utc)

    def is_expired(self, now: Optional[int] = None) -> bool:
        """Return True once ``now`` (epoch ms, defaults to the clock) reaches ``expires_at``."""

        if now is None:
            now = current_time_millis()
        return now >= self.expires_at


class StorageService:
    """Async storage abstraction over the SQLite ``tokens`` table.

    Errors from SQLite propagate to the caller; the reporting policy lives in
    :class:`services.oauth_tokens.TokenStore`.
    """

    def __init__(self, db_url: str):
        if not db_url.startswith("sqlite"):
            raise ValueError("Only SQLite URLs are supported for token storage")
        path = db_url.split("///")[-1]
        self._db_path = Path(path)
        self._init_lock = asyncio.Lock()
        self._initialized = False

    @property
    def database_path(self) -> Path:
        return self._db_path

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Create the database file and run Alembic migrations idempotently."""

        async with self._init_lock:
            if self._initialized:
                return
            try:
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
                await asyncio.to_thread(run_migrations, self._db_path)
            except Exception as exc:
                raise StorageInitializationError(self._db_path, str(exc)) from exc
            self._initialized = True

    @asynccontextmanager
    async def _connection(self, *, row_factory: bool = False):
        if not self._initialized:
            raise StorageNotInitializedError("StorageService.initialize() has not completed")
        async with aiosqlite.connect(self._db_path) as db:
            if row_factory:
                db.row_factory = aiosqlite.Row
            yield db

    async def _execute(self, query: str, *params: Any) -> None:
        async with self._connection() as db:
            await db.execute(query, params)
            await db.commit()

    async def _fetchone(self, query: str, *params: Any) -> Optional[aiosqlite.Row]:
        async with self._connection(row_factory=True) as db:
            async with db.execute(query, params) as cursor:
                return await cursor.fetchone()

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> TokenRecord:
        return TokenRecord(
            username=row["trakt_username"],
            access_token=row["access_token"],
            refresh_token=row["refresh_token"],
            expires_at=int(row["expires_at"]),
            created_at=_parse_datetime(row["created_at"], username=row["trakt_username"], column="created_at"),
            updated_at=_parse_datetime(row["updated_at"], username=row["trakt_username"], column="updated_at"),
        )

    async def upsert_tokens(self, username: str, access_token: str, refresh_token: str, expires_at: int) -> None:
        """Insert a token row or overwrite the mutable columns of an existing one.

        ``created_at`` is left alone on conflict and the table trigger bumps
        ``updated_at``.
        """

        await self._execute(
            """
            INSERT INTO tokens (trakt_username, access_token, refresh_token, expires_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(trakt_username) DO UPDATE SET
                access_token = excluded.access_token,
                refresh_token = excluded.refresh_token,
                expires_at = excluded.expires_at
            """,
            username,
            access_token,
            refresh_token,
            expires_at,
        )

    async def get_tokens(self, username: str) -> Optional[TokenRecord]:
        """Fetch the token row for ``username`` if one exists."""

        row = await self._fetchone(
            """
            SELECT trakt_username, access_token, refresh_token, expires_at, created_at, updated_at
              FROM tokens
             WHERE trakt_username = ?
            """,
            username,
        )
        if not row:
            return None
        return self._row_to_record(row)
