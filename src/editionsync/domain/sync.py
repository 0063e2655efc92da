"""Application service that synchronizes edition numbers for a batch of products."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from editionsync.config.sync import SyncConfig
from editionsync.domain.clock import utcnow
from editionsync.domain.concurrency import PRODUCT_LOCKS, call_with_timeout
from editionsync.domain.editions import (
    CertificateIssuer,
    assign_edition_numbers,
    reconcile_assignments,
    record_sync_run,
    remove_duplicate_line_items,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from editionsync.domain.clock import Clock
    from editionsync.domain.concurrency import ProductLockRegistry
    from editionsync.domain.editions import RecordOutcome
    from editionsync.domain.model import OrderLineItem
    from editionsync.domain.ports import EditionUnitOfWork, OrderSource, ProductInfo

log = getLogger(__name__)

UNKNOWN_PRODUCT_TITLE = "Unknown Product"


class InvalidSyncRequestError(ValueError):
    """Raised when a sync request names no products."""


class ProductSyncError(RuntimeError):
    """A product failed after its title was known."""

    def __init__(self, message: str, *, product_title: str) -> None:
        super().__init__(message)
        self.product_title = product_title


@dataclass(slots=True, frozen=True)
class ProductSyncResult:
    total_editions: int
    edition_total: int | None
    line_items_processed: int
    active_items: int
    removed_items: int
    from_cache: bool = False

    def to_payload(self) -> dict[str, object]:
        return {
            "totalEditions": self.total_editions,
            "editionTotal": self.edition_total,
            "lineItemsProcessed": self.line_items_processed,
            "activeItems": self.active_items,
            "removedItems": self.removed_items,
        }


@dataclass(slots=True, frozen=True)
class ProductSyncOutcome:
    product_id: str
    product_title: str
    result: ProductSyncResult | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "productId": self.product_id,
            "productTitle": self.product_title,
        }
        if self.result is not None:
            payload["result"] = self.result.to_payload()
        else:
            payload["error"] = self.error
        return payload


@dataclass(slots=True)
class BatchSyncSummary:
    total_products: int
    successful_products: int
    sync_results: list[ProductSyncOutcome] = field(default_factory=list[ProductSyncOutcome])
    recorded: RecordOutcome | None = None

    def to_payload(self) -> dict[str, object]:
        return {
            "success": True,
            "totalProducts": self.total_products,
            "successfulProducts": self.successful_products,
            "syncResults": [outcome.to_payload() for outcome in self.sync_results],
        }


def sync_products(
    product_ids: Sequence[str],
    *,
    order_source: OrderSource,
    unit_of_work_factory: Callable[[], EditionUnitOfWork],
    force_sync: bool = False,
    config: SyncConfig | None = None,
    locks: ProductLockRegistry = PRODUCT_LOCKS,
    clock: Clock = utcnow,
) -> BatchSyncSummary:
    """Synchronize each product in turn and record the batch in the audit trail.

    A failing product becomes an error entry and the remaining products still run.
    """

    if not product_ids:
        raise InvalidSyncRequestError("Product IDs array is required")

    settings = config or SyncConfig()
    outcomes: list[ProductSyncOutcome] = []
    for product_id in product_ids:
        try:
            info, result = sync_product_editions(
                product_id,
                order_source=order_source,
                unit_of_work_factory=unit_of_work_factory,
                force_sync=force_sync,
                config=settings,
                locks=locks,
                clock=clock,
            )
        except Exception as exc:  # noqa: BLE001
            log.exception("Edition sync failed for product %s", product_id)
            title = (
                exc.product_title if isinstance(exc, ProductSyncError) else UNKNOWN_PRODUCT_TITLE
            )
            outcomes.append(
                ProductSyncOutcome(
                    product_id=product_id,
                    product_title=title,
                    error=str(exc) or type(exc).__name__,
                )
            )
            continue
        outcomes.append(
            ProductSyncOutcome(product_id=product_id, product_title=info.title, result=result)
        )

    summary = BatchSyncSummary(
        total_products=len(product_ids),
        successful_products=sum(1 for outcome in outcomes if outcome.succeeded),
        sync_results=outcomes,
    )
    summary.recorded = record_sync_run(
        unit_of_work_factory,
        total_products=summary.total_products,
        successful_products=summary.successful_products,
        sync_results=[outcome.to_payload() for outcome in outcomes],
        clock=clock,
    )
    log.info(
        "Synced %s of %s products", summary.successful_products, summary.total_products
    )
    return summary


def sync_product_editions(
    product_id: str,
    *,
    order_source: OrderSource,
    unit_of_work_factory: Callable[[], EditionUnitOfWork],
    force_sync: bool = False,
    config: SyncConfig | None = None,
    locks: ProductLockRegistry = PRODUCT_LOCKS,
    clock: Clock = utcnow,
) -> tuple[ProductInfo, ProductSyncResult]:
    """Run the edition pipeline for one product while holding its lock.

    Without ``force_sync`` a product that already has rows is summarized from the
    ledger and the order feed is not read.
    """

    settings = config or SyncConfig()
    timeout = settings.order_source_timeout_seconds
    info = call_with_timeout(
        lambda: order_source.get_product_info(product_id),
        timeout=timeout,
        description=f"Product lookup for {product_id}",
    )

    try:
        with locks.hold(product_id), unit_of_work_factory() as uow:
            existing = list(uow.repositories.line_items.list_for_product(product_id))
            if existing and not force_sync:
                log.info("Product %s already synced, summarizing stored rows", product_id)
                return info, summarize_rows(existing, edition_total=info.edition_total)

            line_items = call_with_timeout(
                lambda: order_source.fetch_all_orders_with_product(product_id, info.variant_ids),
                timeout=timeout,
                description=f"Order fetch for {product_id}",
            )
            if not line_items:
                log.info("No orders found for product %s", product_id)
                return info, ProductSyncResult(
                    total_editions=0,
                    edition_total=info.edition_total,
                    line_items_processed=0,
                    active_items=0,
                    removed_items=0,
                )

            assignments = assign_edition_numbers(line_items, edition_total=info.edition_total)
            reconciled = reconcile_assignments(
                uow,
                assignments,
                product_id=product_id,
                force_sync=force_sync,
                certificates=CertificateIssuer(settings.certificate_base_url),
                clock=clock,
            )
            deduplicated = remove_duplicate_line_items(
                uow,
                product_id,
                order_source=order_source,
                bucket=settings.duplicate_bucket,
                clock=clock,
            )
    except Exception as exc:
        raise ProductSyncError(
            str(exc) or type(exc).__name__, product_title=info.title
        ) from exc

    return info, ProductSyncResult(
        total_editions=len(assignments),
        edition_total=info.edition_total,
        line_items_processed=reconciled.line_items_processed,
        active_items=reconciled.active_items,
        removed_items=reconciled.removed_items + deduplicated.removed_count,
    )


def summarize_rows(
    line_items: Sequence[OrderLineItem], *, edition_total: int | None = None
) -> ProductSyncResult:
    removed = sum(1 for item in line_items if item.is_removed)
    return ProductSyncResult(
        total_editions=len(line_items),
        edition_total=edition_total,
        line_items_processed=len(line_items),
        active_items=len(line_items) - removed,
        removed_items=removed,
        from_cache=True,
    )
