"""Edition assignment: rank order line items by purchase time."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from editionsync.domain.clock import ensure_utc

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from editionsync.domain.ports.fetching import OrderLineItemPayload

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class EditionAssignment:
    """A freshly computed edition number for one line item of the order feed."""

    order_id: str
    line_item_id: str
    created_at: datetime
    edition_number: int
    order_name: str | None = None
    product_id: str | None = None
    variant_id: str | None = None
    vendor_name: str | None = None


def assign_edition_numbers(
    line_items: Sequence[OrderLineItemPayload],
    *,
    edition_total: int | None = None,
) -> list[EditionAssignment]:
    """Number ``line_items`` 1..N in ascending ``created_at`` order.

    The sort is stable, so line items sharing a timestamp keep their feed order.
    ``edition_total`` does not limit the numbering: an oversold product still gets
    consecutive numbers past the cap so every sold unit stays traceable.
    """

    ordered = sorted(line_items, key=lambda item: ensure_utc(item.created_at))
    assignments = [
        EditionAssignment(
            order_id=item.order_id,
            line_item_id=item.line_item_id,
            created_at=item.created_at,
            edition_number=number,
            order_name=item.order_name,
            product_id=item.product_id,
            variant_id=item.variant_id,
            vendor_name=item.vendor_name,
        )
        for number, item in enumerate(ordered, start=1)
    ]

    if edition_total is not None and len(assignments) > edition_total:
        log.warning(
            "Edition cap exceeded: %s line items for an edition of %s",
            len(assignments),
            edition_total,
        )
    return assignments
