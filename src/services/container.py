"""Application container wiring configuration."""
from __future__ import annotations

import logging

from app.config import Settings
from services.exceptions import StorageInitializationError
from services.oauth_tokens import TokenStore
from services.storage import StorageService

logger = logging.getLogger(__name__)


class AppContainer:
    """Simple service locator handing the token store to its consumers."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.storage = StorageService(settings.database_url)
        self.token_store = TokenStore(self.storage)

    async def startup(self) -> None:
        """Initialize the database; the process cannot continue without it."""

        try:
            await self.storage.initialize()
        except StorageInitializationError:
            logger.exception("Failed to initialize database")
            raise SystemExit(1)
        logger.info("Database initialized successfully.")
