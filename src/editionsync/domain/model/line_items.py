"""Persisted order line items and the row-level rules of the edition ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple
from uuid import UUID, uuid4

from .enums import LineItemStatus

if TYPE_CHECKING:
    from datetime import datetime


class LineItemKey(NamedTuple):
    """Natural key of a purchase event instance."""

    order_id: str
    line_item_id: str


class LineItemRemovedError(ValueError):
    """Raised when an edition number is assigned to a removed line item."""

    def __init__(self, key: LineItemKey) -> None:
        self.key = key
        super().__init__(
            f"Line item {key.line_item_id} of order {key.order_id} is removed "
            "and cannot carry an edition number"
        )


@dataclass(slots=True, frozen=True)
class Certificate:
    """Opaque proof-of-authenticity reference attached to a line item."""

    url: str
    token: str
    generated_at: datetime


@dataclass(eq=False, kw_only=True)
class OrderLineItem:
    """One sold unit of a product, the unit of edition numbering.

    ``status`` is terminal once ``REMOVED``; removed rows never carry an
    edition number. Only the resequencer assigns numbers to active rows.
    """

    order_id: str
    line_item_id: str
    created_at: datetime
    order_name: str | None = None
    product_id: str | None = None
    variant_id: str | None = None
    vendor_name: str | None = None
    edition_number: int | None = None
    status: LineItemStatus = LineItemStatus.ACTIVE
    removed_reason: str | None = None
    updated_at: datetime | None = None
    certificate_url: str | None = None
    certificate_token: str | None = None
    certificate_generated_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)

    @property
    def key(self) -> LineItemKey:
        return LineItemKey(self.order_id, self.line_item_id)

    @property
    def is_active(self) -> bool:
        return self.status == LineItemStatus.ACTIVE

    @property
    def is_removed(self) -> bool:
        return self.status == LineItemStatus.REMOVED

    @property
    def has_certificate(self) -> bool:
        return bool(self.certificate_url)

    def touch(self, at: datetime) -> None:
        self.updated_at = at

    def assign_edition(self, number: int, *, at: datetime) -> None:
        if self.is_removed:
            raise LineItemRemovedError(self.key)
        if number < 1:
            raise ValueError(f"Edition numbers start at 1, got {number}")
        self.edition_number = number
        self.touch(at)

    def clear_edition(self, *, at: datetime) -> None:
        self.edition_number = None
        self.touch(at)

    def mark_removed(self, reason: str, *, at: datetime) -> None:
        if self.is_removed:
            return
        self.status = LineItemStatus.REMOVED
        self.removed_reason = reason
        self.clear_edition(at=at)

    def merge_vendor_name(self, vendor_name: str | None) -> None:
        """Take ``vendor_name`` when present; an existing name is never erased."""

        if vendor_name and vendor_name.strip():
            self.vendor_name = vendor_name

    def attach_certificate(self, certificate: Certificate) -> None:
        self.certificate_url = certificate.url
        self.certificate_token = certificate.token
        self.certificate_generated_at = certificate.generated_at
