from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from editionsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyEditionUnitOfWork,
    StartupError,
    configured_engine,
    create_edition_engine,
    shutdown,
    startup,
)
from editionsync.config.sync import SyncConfig
from editionsync.domain.concurrency import ProductLockRegistry
from editionsync.domain.model import LineItemKey, LineItemStatus
from editionsync.domain.ports import PersistenceError, ProductInfo
from editionsync.domain.sync import sync_products
from tests.helpers.editions import PRODUCT_ID, FakeOrderSource, at, make_line_item, make_payload

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemyEditionUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:")
    engine_b = create_engine("sqlite+pysqlite:///:memory:")

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_uncommitted_changes_are_discarded(
    sqlite_unit_of_work: Callable[[], SqlAlchemyEditionUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.line_items.add(make_line_item("1"))

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.line_items.list_for_product(PRODUCT_ID) == []


def test_failed_savepoint_keeps_earlier_writes(
    sqlite_unit_of_work: Callable[[], SqlAlchemyEditionUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.line_items.add(make_line_item("1", order_id="A"))
        uow.repositories.line_items.add(make_line_item("2", order_id="B"))
        uow.commit()

    with sqlite_unit_of_work() as uow:
        first = uow.repositories.line_items.get(LineItemKey("A", "1"))
        assert first is not None
        with uow.savepoint():
            first.assign_edition(1, at=at(100))
        with pytest.raises(PersistenceError), uow.savepoint():
            uow.repositories.line_items.add(make_line_item("2", order_id="B"))
        uow.commit()

    with sqlite_unit_of_work() as uow:
        reloaded = uow.repositories.line_items.get(LineItemKey("A", "1"))

    assert reloaded is not None
    assert reloaded.edition_number == 1
    assert reloaded.updated_at == at(100)


def test_file_database_supports_savepoints(tmp_path_factory: pytest.TempPathFactory) -> None:
    database = tmp_path_factory.mktemp("ledger") / "editions.db"
    startup(engine=create_edition_engine(f"sqlite+pysqlite:///{database}"), force=True)

    with SqlAlchemyEditionUnitOfWork() as uow:
        with uow.savepoint():
            uow.repositories.line_items.add(make_line_item("1"))
        uow.commit()

    with SqlAlchemyEditionUnitOfWork() as uow:
        rows = uow.repositories.line_items.list_for_product(PRODUCT_ID)

    assert [row.line_item_id for row in rows] == ["1"]


def test_sync_products_against_sqlite_ledger(
    sqlite_unit_of_work: Callable[[], SqlAlchemyEditionUnitOfWork],
) -> None:
    source = FakeOrderSource(
        products={PRODUCT_ID: ProductInfo(title="Mural Print", edition_total=10)},
        line_items={
            PRODUCT_ID: [
                make_payload("11", order_id="A", created_at=at(0)),
                make_payload("12", order_id="A", created_at=at(5)),
                make_payload("20", order_id="B", created_at=at(600)),
                make_payload("30", order_id="C", created_at=at(1200)),
            ]
        },
        skus={"11": "PRINT-1", "12": "PRINT-1", "20": "PRINT-1", "30": "PRINT-1"},
    )

    summary = sync_products(
        [PRODUCT_ID],
        order_source=source,
        unit_of_work_factory=sqlite_unit_of_work,
        config=SyncConfig(duplicate_bucket=timedelta(minutes=1)),
        locks=ProductLockRegistry(),
        clock=lambda: at(10_000),
    )

    assert summary.successful_products == 1
    assert summary.recorded is not None
    assert summary.recorded.recorded

    with sqlite_unit_of_work() as uow:
        rows = uow.repositories.line_items.list_for_product(PRODUCT_ID)
        runs = uow.repositories.sync_runs.latest()

    numbers = {row.line_item_id: row.edition_number for row in rows}
    assert numbers == {"12": 1, "20": 2, "30": 3, "11": None}
    removed = next(row for row in rows if row.line_item_id == "11")
    assert removed.status is LineItemStatus.REMOVED
    assert all(row.certificate_token for row in rows)
    assert len(runs) == 1
    assert runs[0].successful_products == 1
