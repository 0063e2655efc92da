from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.pool import StaticPool

from editionsync.adapters.sqlalchemy import start_mappers
from editionsync.adapters.sqlalchemy.migrations import upgrade_head
from editionsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyEditionUnitOfWork,
    create_edition_engine,
    shutdown,
    startup,
)
from editionsync.domain.concurrency import ProductLockRegistry

os.environ.setdefault("EDITIONSYNC_DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # one shared connection so the in-memory database survives across sessions and threads
    engine = create_edition_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyEditionUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyEditionUnitOfWork:
        return SqlAlchemyEditionUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def locks() -> ProductLockRegistry:
    return ProductLockRegistry()
