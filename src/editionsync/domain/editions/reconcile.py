"""Reconciliation of computed assignments against the persisted ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from editionsync.domain.clock import utcnow
from editionsync.domain.model import LineItemKey, OrderLineItem
from editionsync.domain.ports import PersistenceError

from .certificates import CertificateIssuer
from .resequence import resequence_editions

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from editionsync.domain.clock import Clock
    from editionsync.domain.ports import EditionUnitOfWork

    from .assign import EditionAssignment
    from .resequence import ResequenceResult

log = getLogger(__name__)


@dataclass(slots=True)
class ReconcileResult:
    line_items_processed: int = 0
    active_items: int = 0
    removed_items: int = 0
    inserted: int = 0
    failed: list[LineItemKey] = field(default_factory=list)
    resequenced: ResequenceResult | None = None


def reconcile_assignments(
    uow: EditionUnitOfWork,
    assignments: Sequence[EditionAssignment],
    *,
    product_id: str,
    force_sync: bool = False,
    certificates: CertificateIssuer | None = None,
    clock: Clock = utcnow,
) -> ReconcileResult:
    """Bring the ledger in line with ``assignments`` and resequence ``product_id``.

    Unknown line items are inserted as active, unnumbered rows with a fresh
    certificate; numbers are only handed out by the resequencer. Known rows keep
    their status. A forced sync refreshes ``updated_at``, fills in a missing vendor
    name, clears any number left on a removed row and issues a certificate to an
    active row that has none. Each row is written on its own and failures are skipped.
    """

    issuer = certificates or CertificateIssuer()
    repository = uow.repositories.line_items
    result = ReconcileResult()
    now = clock()

    for assignment in assignments:
        key = LineItemKey(assignment.order_id, assignment.line_item_id)
        try:
            existing = repository.get(key)
            if existing is None:
                with uow.savepoint():
                    repository.add(_new_line_item(assignment, issuer, now))
                result.inserted += 1
                result.active_items += 1
            else:
                if force_sync:
                    with uow.savepoint():
                        existing.touch(now)
                        existing.merge_vendor_name(assignment.vendor_name)
                        if existing.is_removed:
                            existing.clear_edition(at=now)
                        elif not existing.has_certificate:
                            existing.attach_certificate(
                                issuer.issue(existing.line_item_id, at=now)
                            )
                if existing.is_removed:
                    result.removed_items += 1
                else:
                    result.active_items += 1
        except PersistenceError:
            log.exception(
                "Could not reconcile line item %s of order %s", key.line_item_id, key.order_id
            )
            result.failed.append(key)
            continue
        result.line_items_processed += 1

    uow.commit()
    if assignments:
        result.resequenced = resequence_editions(uow, product_id, clock=clock)

    log.info(
        "Reconciled product %s: %s processed, %s inserted, %s failed",
        product_id,
        result.line_items_processed,
        result.inserted,
        len(result.failed),
    )
    return result


def _new_line_item(
    assignment: EditionAssignment,
    issuer: CertificateIssuer,
    now: datetime,
) -> OrderLineItem:
    line_item = OrderLineItem(
        order_id=assignment.order_id,
        line_item_id=assignment.line_item_id,
        created_at=assignment.created_at,
        order_name=assignment.order_name,
        product_id=assignment.product_id,
        variant_id=assignment.variant_id,
        vendor_name=assignment.vendor_name,
        edition_number=None,
        updated_at=now,
    )
    line_item.attach_certificate(issuer.issue(assignment.line_item_id, at=now))
    return line_item
