"""Alembic migration helpers for runtime initialization."""
from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def run_migrations(database_path: Path) -> None:
    """Run Alembic migrations against the provided SQLite database."""

    config = Config(str(ALEMBIC_INI))
    config.set_main_option("sqlalchemy.url", f"sqlite:///{database_path}")
    config.set_main_option("db_path", str(database_path))
    config.attributes["configure_logger"] = False
    command.upgrade(config, "head")
    logger.info("Database migrations complete for %s", database_path)
