"""Persistent Trakt OAuth token store backed by StorageService."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import aiosqlite

from services.exceptions import StorageError
from services.storage import StorageService, TokenRecord, current_time_millis

logger = logging.getLogger(__name__)

# UnicodeEncodeError comes from SQLite binding strings with lone surrogates.
_STORAGE_ERRORS = (aiosqlite.Error, StorageError, UnicodeEncodeError)

SQLITE_MAX_INTEGER = 2**63 - 1


class TokenLookupStatus(str, Enum):
    """Outcome of a token lookup."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class TokenLookup:
    status: TokenLookupStatus
    record: Optional[TokenRecord] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status is TokenLookupStatus.FOUND


def _is_text(value: str) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _invalid_reason(
    username: str, access_token: str, refresh_token: str, expires_in: int, now: int
) -> Optional[str]:
    if not _is_text(username):
        return "username must be a non-empty UTF-8 string"
    if not _is_text(access_token):
        return "access token must be a non-empty UTF-8 string"
    if not _is_text(refresh_token):
        return "refresh token must be a non-empty UTF-8 string"
    if isinstance(expires_in, bool) or not isinstance(expires_in, int) or expires_in < 0:
        return "expires_in must be a non-negative integer"
    if now + expires_in * 1000 > SQLITE_MAX_INTEGER:
        return "expires_in overflows the stored expiry timestamp"
    return None


class TokenStore:
    """Stores and retrieves Trakt tokens per username.

    Storage failures never propagate out of this class. Writes report success
    as a boolean and reads collapse failures into "nothing returned", with the
    log stream carrying the distinction.
    """

    def __init__(self, storage: StorageService):
        self._storage = storage

    async def store_tokens(self, username: str, access_token: str, refresh_token: str, expires_in: int) -> bool:
        """Upsert tokens for ``username`` expiring ``expires_in`` seconds from now."""

        now = current_time_millis()
        reason = _invalid_reason(username, access_token, refresh_token, expires_in, now)
        if reason:
            logger.warning("Refusing to store tokens for user: %s (%s)", username, reason)
            return False

        expires_at = now + expires_in * 1000
        try:
            await self._storage.upsert_tokens(username, access_token, refresh_token, expires_at)
        except _STORAGE_ERRORS as exc:
            logger.error("Failed to store tokens for user: %s (%s)", username, exc)
            return False
        logger.info("Tokens stored successfully for user: %s", username)
        return True

    async def lookup(self, username: str) -> TokenLookup:
        """Return a tagged result separating missing tokens from storage failures."""

        try:
            record = await self._storage.get_tokens(username)
        except _STORAGE_ERRORS as exc:
            logger.error("Failed to retrieve tokens for user: %s (%s)", username, exc)
            return TokenLookup(TokenLookupStatus.ERROR, error=str(exc))
        if record is None:
            logger.warning("No tokens found for user: %s", username)
            return TokenLookup(TokenLookupStatus.NOT_FOUND)
        logger.debug("Tokens retrieved for user: %s", username)
        return TokenLookup(TokenLookupStatus.FOUND, record=record)

    async def get_tokens(self, username: str) -> Optional[TokenRecord]:
        """Return stored tokens for ``username``, or None when absent or unreadable."""

        result = await self.lookup(username)
        return result.record
