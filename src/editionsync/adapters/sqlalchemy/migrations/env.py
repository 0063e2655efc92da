"""Alembic environment for the edition ledger schema."""

from __future__ import annotations

import logging
from logging.config import fileConfig
from pathlib import Path
from typing import TYPE_CHECKING, Any

from alembic import context
from sqlalchemy import pool

from editionsync.adapters.sqlalchemy import create_edition_engine, mapper_registry, start_mappers
from editionsync.config import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

config = context.config

if config.config_file_name is not None and Path(config.config_file_name).suffix == ".ini":
    fileConfig(config.config_file_name)

log = logging.getLogger(__name__)

start_mappers()


def _configure(**options: Any) -> None:
    context.configure(
        target_metadata=mapper_registry.metadata,
        render_as_batch=True,
        compare_type=True,
        **options,
    )


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


def _ledger_uri() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_uri()


if context.is_offline_mode():
    log.info("Rendering ledger migrations as SQL")
    _configure(url=_ledger_uri(), literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()
elif (shared := config.attributes.get("connection")) is not None:
    _migrate(shared)
else:
    engine = create_edition_engine(_ledger_uri(), poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            _migrate(connection)
    finally:
        engine.dispose()
