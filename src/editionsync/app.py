"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from editionsync.adapters.shopify import ShopifyOrderSource
from editionsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyEditionUnitOfWork,
    is_started,
    startup,
)
from editionsync.config.sync import get_sync_config
from editionsync.domain.editions import check_edition_integrity
from editionsync.domain.ports.unit_of_work import EditionUnitOfWork
from editionsync.domain.sync import sync_products

if TYPE_CHECKING:
    from collections.abc import Sequence

    from editionsync.config.sync import SyncConfig
    from editionsync.domain.editions import IntegrityReport
    from editionsync.domain.model import OrderLineItem
    from editionsync.domain.ports import OrderSource
    from editionsync.domain.sync import BatchSyncSummary

UnitOfWorkFactory = Callable[[], EditionUnitOfWork]


log = getLogger(__name__)


def ensure_started() -> None:
    if not is_started():
        startup()


def build_order_source() -> OrderSource:
    return ShopifyOrderSource()


def sync_all_products(
    product_ids: Sequence[str],
    *,
    force_sync: bool = False,
    source: OrderSource | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
) -> BatchSyncSummary:
    """Synchronise edition numbers of ``product_ids`` using the configured adapters."""

    if unit_of_work_factory is None:
        ensure_started()
    effective_source = source or build_order_source()
    effective_uow = unit_of_work_factory or SqlAlchemyEditionUnitOfWork
    effective_config = config or get_sync_config()
    log.info(
        "Starting edition sync: products=%s, force_sync=%s", len(product_ids), force_sync
    )

    summary = sync_products(
        product_ids,
        order_source=effective_source,
        unit_of_work_factory=effective_uow,
        force_sync=force_sync,
        config=effective_config,
    )

    recorded = summary.recorded is not None and summary.recorded.recorded
    log.info(
        f"Finished edition sync: successful={summary.successful_products}, "
        f"total={summary.total_products}, recorded={recorded}"
    )
    return summary


def list_product_editions(
    product_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[OrderLineItem]:
    if unit_of_work_factory is None:
        ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemyEditionUnitOfWork
    with effective_uow() as uow:
        return list(uow.repositories.line_items.list_for_product(product_id))


def check_product_integrity(
    product_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> IntegrityReport:
    line_items = list_product_editions(product_id, unit_of_work_factory=unit_of_work_factory)
    report = check_edition_integrity(product_id, line_items)
    if not report.is_consistent:
        log.warning("Edition ledger of product %s is inconsistent", product_id)
    return report
