"""Alembic environment for the token database.

Migrations are imperative SQL, so no metadata is bound. When the application
runs migrations it passes the database file as ``db_path`` and asks Alembic to
leave logging alone.
"""
from __future__ import annotations

import logging
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, pool

DEFAULT_URL = "sqlite:///./trakt_tokens.db"

config = context.config
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)
logger = logging.getLogger("alembic.env")


def _database_url() -> str:
    db_path = config.get_main_option("db_path")
    if db_path:
        return f"sqlite:///{Path(db_path).resolve()}"
    return config.get_main_option("sqlalchemy.url") or DEFAULT_URL


def _run_offline(url: str) -> None:
    context.configure(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_online(url: str) -> None:
    engine = create_engine(url, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=None)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()
    logger.debug("tokens schema at head for %s", url)


if context.is_offline_mode():
    _run_offline(_database_url())
else:
    _run_online(_database_url())
