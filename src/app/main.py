"""Process entrypoint that prepares the token database."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from app.config import Settings, get_settings
from services.container import AppContainer

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def create_container(settings: Optional[Settings] = None) -> AppContainer:
    """Build the container from explicit or environment-derived settings."""

    return AppContainer(settings or get_settings())


async def main(settings: Optional[Settings] = None) -> AppContainer:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    container = create_container(settings)
    await container.startup()
    return container


if __name__ == "__main__":
    asyncio.run(main())
