"""Read-only integrity check of a product's edition ledger."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .resequence import sequence_key

if TYPE_CHECKING:
    from collections.abc import Sequence

    from editionsync.domain.model import LineItemKey, OrderLineItem


@dataclass(slots=True, frozen=True)
class IntegrityReport:
    product_id: str
    active_count: int
    removed_count: int
    duplicate_numbers: tuple[int, ...] = ()
    missing_numbers: tuple[int, ...] = ()
    out_of_range_numbers: tuple[int, ...] = ()
    unnumbered_active: tuple[LineItemKey, ...] = ()
    numbered_removed: tuple[LineItemKey, ...] = ()
    out_of_order: tuple[LineItemKey, ...] = ()

    @property
    def is_consistent(self) -> bool:
        return not (
            self.duplicate_numbers
            or self.missing_numbers
            or self.out_of_range_numbers
            or self.unnumbered_active
            or self.numbered_removed
            or self.out_of_order
        )

    def to_payload(self) -> dict[str, object]:
        return {
            "productId": self.product_id,
            "consistent": self.is_consistent,
            "activeCount": self.active_count,
            "removedCount": self.removed_count,
            "duplicateNumbers": list(self.duplicate_numbers),
            "missingNumbers": list(self.missing_numbers),
            "outOfRangeNumbers": list(self.out_of_range_numbers),
            "unnumberedActive": [key._asdict() for key in self.unnumbered_active],
            "numberedRemoved": [key._asdict() for key in self.numbered_removed],
            "outOfOrder": [key._asdict() for key in self.out_of_order],
        }


def check_edition_integrity(
    product_id: str, line_items: Sequence[OrderLineItem]
) -> IntegrityReport:
    """Verify that active rows are numbered exactly 1..N in purchase order.

    Also flags removed rows that still carry a number. Nothing is modified.
    """

    rows = [item for item in line_items if item.product_id == product_id]
    active = sorted((item for item in rows if item.is_active), key=sequence_key)
    removed = [item for item in rows if item.is_removed]

    numbers = [item.edition_number for item in active if item.edition_number is not None]
    counts = Counter(numbers)
    expected = range(1, len(active) + 1)

    out_of_order = tuple(
        item.key
        for rank, item in enumerate(active, start=1)
        if item.edition_number is not None and item.edition_number != rank
    )

    return IntegrityReport(
        product_id=product_id,
        active_count=len(active),
        removed_count=len(removed),
        duplicate_numbers=tuple(sorted(n for n, seen in counts.items() if seen > 1)),
        missing_numbers=tuple(n for n in expected if n not in counts),
        out_of_range_numbers=tuple(sorted({n for n in numbers if n not in expected})),
        unnumbered_active=tuple(item.key for item in active if item.edition_number is None),
        numbered_removed=tuple(item.key for item in removed if item.edition_number is not None),
        out_of_order=out_of_order,
    )
