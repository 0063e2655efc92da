"""Resequencing: rewrite active edition numbers as a dense 1..N sequence."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from editionsync.domain.clock import ensure_utc, utcnow
from editionsync.domain.ports import PersistenceError

if TYPE_CHECKING:
    from datetime import datetime

    from editionsync.domain.clock import Clock
    from editionsync.domain.model import LineItemKey, OrderLineItem
    from editionsync.domain.ports import EditionUnitOfWork

log = getLogger(__name__)


@dataclass(slots=True)
class ResequenceResult:
    product_id: str
    active_items: int = 0
    renumbered: int = 0
    failed: list[LineItemKey] = field(default_factory=list)
    completed: bool = True


def line_item_id_sort_key(line_item_id: str) -> tuple[int, int, str]:
    """Order numeric line item ids numerically and everything else lexically after them."""

    if line_item_id.isdigit():
        return (0, int(line_item_id), line_item_id)
    return (1, 0, line_item_id)


def sequence_key(item: OrderLineItem) -> tuple[datetime, tuple[int, int, str], str]:
    return (
        ensure_utc(item.created_at),
        line_item_id_sort_key(item.line_item_id),
        item.order_id,
    )


def resequence_editions(
    uow: EditionUnitOfWork,
    product_id: str,
    *,
    clock: Clock = utcnow,
) -> ResequenceResult:
    """Renumber the active rows of ``product_id`` to 1..N by purchase time.

    Rows already holding their target number are left untouched. The counter only
    advances after a successful write, so a failed row leaves no gap behind it and
    is repaired by the next run. A failed read aborts without writing anything.
    """

    result = ResequenceResult(product_id=product_id)
    try:
        active = sorted(uow.repositories.line_items.list_active(product_id), key=sequence_key)
    except PersistenceError:
        log.exception("Could not load active line items of product %s", product_id)
        result.completed = False
        return result

    now = clock()
    counter = 1
    for item in active:
        if item.edition_number == counter:
            counter += 1
            continue
        try:
            with uow.savepoint():
                item.assign_edition(counter, at=now)
        except PersistenceError:
            log.exception("Could not renumber line item %s", item.line_item_id)
            result.failed.append(item.key)
            continue
        result.renumbered += 1
        counter += 1

    result.active_items = counter - 1
    uow.commit()
    log.info(
        "Resequenced product %s: %s active, %s renumbered, %s failed",
        product_id,
        result.active_items,
        result.renumbered,
        len(result.failed),
    )
    return result
