"""SQLAlchemy adapter package for the edition ledger."""

from __future__ import annotations

from .mappings import (
    create_all_tables,
    mapper_registry,
    order_line_item_table,
    start_mappers,
    sync_run_table,
)
from .repositories import SqlAlchemyOrderLineItemRepository, SqlAlchemySyncRunRepository
from .unit_of_work import (
    SqlAlchemyEditionUnitOfWork,
    StartupError,
    configured_engine,
    create_edition_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyEditionUnitOfWork",
    "SqlAlchemyOrderLineItemRepository",
    "SqlAlchemySyncRunRepository",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "create_edition_engine",
    "is_started",
    "mapper_registry",
    "order_line_item_table",
    "shutdown",
    "start_mappers",
    "startup",
    "sync_run_table",
]
